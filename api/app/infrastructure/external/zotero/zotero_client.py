"""
Cliente para la Zotero Web API v3.

Solo cubre lo que usa el sync:
- GET  items/new?itemType=videoRecording  (plantilla)
- POST {biblioteca}/items                 (escritura masiva, max 50)
- POST {biblioteca}/collections           (crear coleccion)

Cada request se agenda en el RateLimiter de Zotero compartido.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from loguru import logger

from app.infrastructure.concurrency import RateLimiter
from app.shared.exceptions.domain import UpstreamApiException


ZOTERO_API_URL = "https://api.zotero.org"
ZOTERO_API_VERSION = "3"
VIDEO_ITEM_TYPE = "videoRecording"


class ZoteroApiError(UpstreamApiException):
    """Error de integración con Zotero."""

    service = "zotero"


class ZoteroClient:
    """
    Cliente HTTP asincrono de Zotero.

    Si no se inyecta `http_client`, se crea uno propio la primera vez que se
    usa; `aclose()` lo cierra al apagar la aplicacion.
    """

    def __init__(
        self,
        api_key: str,
        library_path: str,
        limiter: RateLimiter,
        *,
        base_url: str = ZOTERO_API_URL,
        timeout_s: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._library_url = f"{self._base_url}/{library_path.strip('/')}"
        self._limiter = limiter
        self._timeout_s = timeout_s
        self._http = http_client
        self._owns_http = http_client is None

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Zotero-API-Version": ZOTERO_API_VERSION,
            "Content-Type": "application/json",
        }

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout_s)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Any = None,
    ) -> Any:
        """
        Ejecuta una request agendada en el limitador y retorna el JSON.

        Raises:
            ZoteroApiError: Error de red o status no 2xx.
        """
        http = self._get_http()
        try:
            response = await self._limiter.schedule(
                http.request,
                method,
                url,
                params=params,
                json=json_body,
                headers=self.headers,
            )
        except httpx.HTTPError as e:
            raise ZoteroApiError(f"Zotero no respondió: {e}") from e

        if response.status_code >= 400:
            raise ZoteroApiError(
                f"Zotero request falló {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ZoteroApiError(f"Respuesta de Zotero no es JSON: {e}") from e

    async def get_template(self, item_type: str = VIDEO_ITEM_TYPE) -> dict[str, Any]:
        """Obtiene una plantilla vacia de item del tipo indicado."""
        logger.info("Obteniendo plantilla de Zotero...")
        template = await self._request(
            "GET", f"{self._base_url}/items/new", params={"itemType": item_type}
        )
        if not isinstance(template, dict) or not template:
            raise ZoteroApiError("Zotero no devolvió una plantilla de item")
        logger.success("Plantilla obtenida de Zotero")
        return template

    async def post_items(self, items: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Crea o actualiza items en una sola escritura.

        Returns:
            Respuesta cruda de Zotero: {"successful": {...}, "success": {...},
            "unchanged": {...}, "failed": {...}}, indexada por posicion.
        """
        return await self._request("POST", f"{self._library_url}/items", json_body=items)

    async def post_collections(self, collections: list[dict[str, Any]]) -> dict[str, Any]:
        """Crea colecciones. Retorna la respuesta cruda de Zotero."""
        return await self._request("POST", f"{self._library_url}/collections", json_body=collections)
