"""
Casos de uso de la aplicacion.
"""
from .video_use_cases import VideoUseCases
from .zotero_sync_use_cases import ZoteroSyncUseCases

__all__ = ["VideoUseCases", "ZoteroSyncUseCases"]
