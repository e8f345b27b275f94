"""
Entidades del sync ESOVDB -> Zotero.

El motor de sync no es dueño de los videos ni de los items: los toma
prestados durante una pasada. Estas clases solo describen lo que viaja
por el pipeline y lo que se le responde al caller.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from app.shared.utils.datetime_utils import DateTimeUtils


# Limites de /videos/list
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 100


class CollectionParent(str, Enum):
    """
    Colecciones padre fijas de la biblioteca Zotero.

    Los hijos de 'topics' estan predefinidos; los de 'series' se crean
    la primera vez que aparece una serie.
    """
    SERIES = "series"
    TOPICS = "topics"


class SyncOperation(str, Enum):
    """Tipo de pasada: POST /sync crea, PUT /sync actualiza."""
    CREATE = "create"
    UPDATE = "update"


class SyncStatus(str, Enum):
    SYNCED = "synced"                       # Zotero y ESOVDB actualizados
    NOTHING_PROCESSED = "nothing_processed" # Zotero no acepto ningun item
    BACK_SYNC_FAILED = "back_sync_failed"   # Zotero acepto items, la ESOVDB no se actualizo


@dataclass(frozen=True)
class VideoQuery:
    """
    Parametros normalizados de una consulta de videos.

    `page` es 1-based, como en la ruta /videos/list/{page}.
    """
    page_size: int = DEFAULT_PAGE_SIZE
    max_records: Optional[int] = None
    page: Optional[int] = None
    created_after: Optional[datetime] = None
    modified_after: Optional[datetime] = None

    @classmethod
    def from_request(
        cls,
        *,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        max_records: Optional[int] = None,
        created_after: Optional[datetime] = None,
        modified_after: Optional[datetime] = None,
    ) -> "VideoQuery":
        """
        Normaliza los parametros como lo hacia la API original:
        - pageSize ausente, <= 0 o > 100 -> 100
        - maxRecords ausente o <= 0 -> sin limite
        - maxRecords < pageSize recorta pageSize
        - page ausente o <= 0 -> todas las paginas
        """
        size = page_size if page_size and 0 < page_size <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE
        limit = max_records if max_records and max_records > 0 else None
        if limit is not None and limit < size:
            size = limit
        return cls(
            page_size=size,
            max_records=limit,
            page=page if page and page > 0 else None,
            created_after=created_after,
            modified_after=modified_after,
        )

    @property
    def route_path(self) -> str:
        return f"/videos/list/{self.page}" if self.page else "/videos/list"

    def cache_params(self) -> Dict[str, Any]:
        return {
            "pageSize": self.page_size,
            "maxRecords": self.max_records,
            "createdAfter": DateTimeUtils.to_iso_z(self.created_after) if self.created_after else None,
            "modifiedAfter": DateTimeUtils.to_iso_z(self.modified_after) if self.modified_after else None,
        }

    def select_page(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Filas de la pagina pedida (o todas si no se pidio pagina)."""
        if self.page is None:
            return rows
        start = (self.page - 1) * self.page_size
        return rows[start:start + self.page_size]

    def describe(self) -> str:
        """Texto para logs, ej: 'pagina 2 (2 resultados por pagina)'."""
        if self.page is not None:
            text = f"pagina {self.page} ({self.page_size} resultados por pagina)"
        else:
            scope = f"hasta {self.max_records}" if self.max_records else "todos los"
            text = f"({self.page_size} resultados por pagina, {scope} resultados)"
        if self.modified_after:
            text += f", modificados despues de {self.modified_after.isoformat()}"
        if self.created_after:
            text += f", creados despues de {self.created_after.isoformat()}"
        return text


@dataclass
class VideoListResult:
    rows: List[Dict[str, Any]]
    total_records: int
    from_cache: bool = False


@dataclass(frozen=True)
class RecordUpdate:
    """Instruccion de parche para un registro de Airtable."""
    id: str
    fields: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "fields": dict(self.fields)}


@dataclass
class PreparedItem:
    """
    Item Zotero listo para enviar, junto al id del video que lo origino.

    El id de la ESOVDB viaja explicitamente; nunca se reconstruye
    a partir de `archiveLocation`.
    """
    record_id: str
    payload: Dict[str, Any]

    @property
    def is_update(self) -> bool:
        return "key" in self.payload and "version" in self.payload


@dataclass(frozen=True)
class WrittenItem:
    """Item aceptado por Zotero con su nuevo token (key, version)."""
    record_id: str
    key: str
    version: int
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FailedItem:
    record_id: str
    code: Optional[int]
    message: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WriteResult:
    """Particion de la respuesta de una escritura masiva en Zotero."""
    successful: List[WrittenItem] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)  # record_ids
    failed: List[FailedItem] = field(default_factory=list)


@dataclass
class SyncResult:
    """Resumen agregado de una pasada de sync."""
    operation: SyncOperation
    status: SyncStatus
    total_items: int = 0
    successful: int = 0
    unchanged: int = 0
    failed: int = 0
    notified: int = 0
    synced: List[RecordUpdate] = field(default_factory=list)
    failed_record_ids: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def has_changes(self) -> bool:
        return self.status == SyncStatus.SYNCED
