"""
Transformacion de videos de la ESOVDB a items Zotero de tipo videoRecording.
"""
from __future__ import annotations

from datetime import tzinfo
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from app.application.dto.video_dto import VideoSyncRecordDTO
from app.application.services.collection_catalog import SeriesCollectionResolver, topic_collection
from app.domain.entities.video import PreparedItem
from app.shared.utils.format_utils import format_date, format_duration, package_authors

CREATOR_TYPE = "contributor"
UNKNOWN_CREATOR = "Unknown"

# Orden de las lineas de `extra`
EXTRA_FIELDS = (
    ("Topic", "topic"),
    ("Tags", "tags_list"),
    ("Location", "location"),
    ("Plus Code", "plus_code"),
    ("Learn More", "learn_more"),
)


def build_creators(first: Optional[Sequence[str]], last: Optional[Sequence[str]]) -> List[Dict[str, str]]:
    """
    Arma la lista de creators a partir de nombres y apellidos paralelos.

    Un presentador sin nombre o sin apellido queda como un solo `name`;
    sin presentadores se usa un unico contributor 'Unknown'.
    """
    creators = []
    for author in package_authors(first, last):
        first_name, last_name = author["firstName"], author["lastName"]
        if first_name and last_name:
            creators.append({"creatorType": CREATOR_TYPE, "firstName": first_name, "lastName": last_name})
        elif first_name or last_name:
            creators.append({"creatorType": CREATOR_TYPE, "name": first_name or last_name})
    if not creators:
        creators.append({"creatorType": CREATOR_TYPE, "name": UNKNOWN_CREATOR})
    return creators


def build_extra(record: VideoSyncRecordDTO) -> str:
    """Lineas 'Titulo: valor' de los atributos opcionales presentes."""
    lines = []
    for title, attr in EXTRA_FIELDS:
        value = getattr(record, attr)
        if value:
            lines.append(f"{title}: {value}")
    return "\n".join(lines)


def build_volume(vol: Any, no: Any) -> str:
    """'vol:no' si hay volumen, si no solo el numero."""
    if vol:
        return f"{vol}:{no if no else ''}"
    return str(no) if no else ""


def build_number_of_volumes(series_count: Any) -> Any:
    try:
        return series_count if float(series_count) > 1 else ""
    except (TypeError, ValueError):
        return ""


def _running_time(value: Any) -> str:
    # Filas de /videos/list ya traen la duracion formateada
    if isinstance(value, str) and ":" in value:
        return value
    return format_duration(value)


class ItemFormatter:
    """
    Transformer ESOVDB -> Zotero.

    Uso:
        formatter = ItemFormatter(resolver, archive_name=..., record_url=...)
        prepared = await formatter.format_item(record, template)
    """

    def __init__(
        self,
        series_resolver: SeriesCollectionResolver,
        *,
        archive_name: str,
        record_url: str,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._series = series_resolver
        self._archive_name = archive_name
        self._record_url = record_url
        self._tz = tz

    async def format_item(self, record: VideoSyncRecordDTO, template: Dict[str, Any]) -> PreparedItem:
        """
        Construye el payload Zotero de un video.

        Puede crear la coleccion de la serie en Zotero (y guardarla en la
        ESOVDB) si el video no trae `zoteroSeries`.

        Returns:
            PreparedItem con el id del video y el payload listo para enviar.
        """
        payload: Dict[str, Any] = {
            **template,
            "itemType": "videoRecording",
            "title": record.title or "",
            "creators": build_creators(record.presenters_first_name, record.presenters_last_name),
            "abstractNote": record.desc or "",
            "videoRecordingFormat": record.format or "",
            "seriesTitle": record.series or "",
            "volume": build_volume(record.vol, record.no),
            "numberOfVolumes": build_number_of_volumes(record.series_count),
            "place": record.provider or "",
            "studio": record.publisher or "",
            "date": str(record.year) if record.year else "",
            "runningTime": _running_time(record.running_time),
            "language": record.language or "",
            "ISBN": "",
            "shortTitle": "",
            "url": record.url or "",
            "accessDate": format_date(record.access_date, self._tz) or "",
            "archive": self._archive_name,
            "archiveLocation": f"{self._record_url}{record.record_id}",
            "libraryCatalog": "",
            "callNumber": str(record.esovdb_id) if record.esovdb_id else "",
            "rights": "",
            "extra": build_extra(record),
            "tags": [],
            "collections": await self._collections(record),
            "relations": {},
        }

        if record.has_zotero_token:
            payload["key"] = record.zotero_key
            payload["version"] = record.zotero_version

        return PreparedItem(record_id=record.record_id, payload=payload)

    async def _collections(self, record: VideoSyncRecordDTO) -> List[str]:
        collections = []
        topic_key = topic_collection(record.topic)
        if topic_key:
            collections.append(topic_key)
        elif record.topic:
            logger.debug(f"Topic sin coleccion en Zotero: '{record.topic}'")

        if record.series:
            if record.zotero_series:
                self._series.remember(record.series, record.zotero_series)
                series_key = record.zotero_series
            else:
                series_key = await self._series.resolve(record.series, record.series_id)
            if series_key and series_key not in collections:
                collections.append(series_key)
        return collections
