"""
Proyeccion de la tabla Videos de la ESOVDB a filas JSON de /videos/list.

Este es el unico lugar que conoce los nombres de fields de Airtable:
- VIDEO_FIELDS es la whitelist que se pide a la API (fields[])
- VIDEO_MAPPINGS decide la clave de salida, el transform y el default
"""

from __future__ import annotations

from datetime import tzinfo
from typing import Any, Optional

from app.shared.utils.format_utils import format_date, format_duration, package_authors

from .types import AirtableRecord, FieldMapping


# Campos de la tabla Series
SERIES_ZOTERO_KEY_FIELD = "Zotero Key"

# Campos de la tabla Videos que escribe el back-sync
ZOTERO_KEY_FIELD = "Zotero Key"
ZOTERO_VERSION_FIELD = "Zotero Version"

MODIFIED_FIELD = "Modified"
PRESENTER_FIRST_FIELD = "Presenter First Name"
PRESENTER_LAST_FIELD = "Presenter Last Name"
ISO_ADDED_FIELD = "ISO Added"

DEFAULT_SORT = [{"field": MODIFIED_FIELD, "direction": "desc"}]


VIDEO_MAPPINGS: list[FieldMapping] = [
    FieldMapping(ZOTERO_KEY_FIELD, "zoteroKey"),
    FieldMapping(ZOTERO_VERSION_FIELD, "zoteroVersion"),
    FieldMapping("Title", "title"),
    FieldMapping("URL", "url"),
    FieldMapping("Year", "year"),
    FieldMapping("Description", "desc"),
    FieldMapping("Running Time", "runningTime", transform=format_duration),
    FieldMapping("Format", "format"),
    # topic y learnMore se devuelven tal cual (null si faltan)
    FieldMapping("Topic", "topic", default=None),
    FieldMapping("Learn More", "learnMore", default=None),
    FieldMapping("Series Text", "series"),
    FieldMapping("Series Count Text", "seriesCount"),
    FieldMapping("Vol.", "vol"),
    FieldMapping("No.", "no"),
    FieldMapping("Publisher Text", "publisher"),
    FieldMapping("Language Code", "language"),
    FieldMapping("Location", "location"),
    FieldMapping("Plus Code", "plusCode"),
    FieldMapping("Video Provider", "provider"),
    FieldMapping("ESOVDBID", "esovdbId"),
    FieldMapping("Record ID", "recordId"),
    FieldMapping("Created", "created", default=None),
    FieldMapping(MODIFIED_FIELD, "modified", default=None),
]

VIDEO_FIELDS: list[str] = [m.airtable_field for m in VIDEO_MAPPINGS] + [
    PRESENTER_FIRST_FIELD,
    PRESENTER_LAST_FIELD,
    ISO_ADDED_FIELD,
]


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def project_video(record: AirtableRecord, tz: Optional[tzinfo] = None) -> dict[str, Any]:
    """
    Proyecta un registro de Videos a la fila JSON que devuelve /videos/list.

    Args:
        record: Registro crudo de Airtable
        tz: Zona horaria para `accessDate` (None = hora local del servidor)

    Returns:
        dict con las claves de VIDEO_MAPPINGS mas `presenters` y `accessDate`
    """
    row: dict[str, Any] = {}
    for m in VIDEO_MAPPINGS:
        raw = record.get(m.airtable_field)
        value = m.transform(raw) if (m.transform and not _is_empty(raw)) else raw
        row[m.key] = m.default if _is_empty(value) else value

    row["presenters"] = package_authors(
        record.get(PRESENTER_FIRST_FIELD),
        record.get(PRESENTER_LAST_FIELD),
    )
    row["accessDate"] = format_date(record.get(ISO_ADDED_FIELD), tz) or ""
    return row


def zotero_token_fields(key: str, version: int) -> dict[str, Any]:
    """Fields del parche que guarda el token Zotero en un video."""
    return {ZOTERO_KEY_FIELD: key, ZOTERO_VERSION_FIELD: version}


def series_key_fields(key: str) -> dict[str, Any]:
    """Fields del parche que guarda la coleccion Zotero de una serie."""
    return {SERIES_ZOTERO_KEY_FIELD: key}
