"""
Cliente para anunciar videos nuevos vía webhook de Discord.
"""
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from app.core.config import settings

# Limites de Discord para embeds
MAX_TITLE_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 2048
EMBED_COLOR = 0x3B88C3


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


class DiscordClient:
    """
    Cliente simple para publicar mensajes en el canal #whats-new.
    """

    def __init__(self, webhook_url: str = None, http_client: Optional[httpx.AsyncClient] = None):
        self.webhook_url = webhook_url if webhook_url is not None else settings.DISCORD_WEBHOOK_URL
        self._http = http_client

    @staticmethod
    def build_new_video_message(item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Arma el mensaje de un item Zotero recien creado.

        Args:
            item: `data` del item tal como lo devuelve Zotero.
        """
        fields: List[Dict[str, Any]] = []
        if item.get("runningTime"):
            fields.append({"name": "Duración", "value": item["runningTime"], "inline": True})
        if item.get("date"):
            fields.append({"name": "Año", "value": str(item["date"]), "inline": True})
        if item.get("seriesTitle"):
            fields.append({"name": "Serie", "value": item["seriesTitle"], "inline": False})

        embed = {
            "title": _truncate(item.get("title") or "Sin título", MAX_TITLE_LENGTH),
            "url": item.get("url") or None,
            "description": _truncate(item.get("abstractNote") or "", MAX_DESCRIPTION_LENGTH),
            "color": EMBED_COLOR,
            "fields": fields,
            "footer": {"text": item.get("archive") or settings.ESOVDB_ARCHIVE_NAME},
        }
        return {"content": "Nuevo video en la ESOVDB", "embeds": [embed]}

    async def send_new_video(self, item: Dict[str, Any]) -> bool:
        """
        Publica un video nuevo en Discord.

        Returns:
            True si Discord acepto el mensaje; False si no hay webhook o fallo.
        """
        if not self.webhook_url:
            logger.warning("Discord webhook no configurado. Saltando notificación.")
            return False

        payload = self.build_new_video_message(item)
        try:
            if self._http is not None:
                response = await self._http.post(self.webhook_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.post(self.webhook_url, json=payload)
            response.raise_for_status()
            return True
        except Exception as e:
            logger.error(f"Error al enviar mensaje a Discord: {e}")
            return False
