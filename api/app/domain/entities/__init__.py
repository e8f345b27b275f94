"""
Entidades del dominio.
"""
from app.domain.entities.video import (
    CollectionParent,
    RecordUpdate,
    SyncOperation,
    SyncResult,
    SyncStatus,
    VideoListResult,
    VideoQuery,
)

__all__ = [
    "CollectionParent",
    "RecordUpdate",
    "SyncOperation",
    "SyncResult",
    "SyncStatus",
    "VideoListResult",
    "VideoQuery",
]
