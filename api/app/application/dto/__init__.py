"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .video_dto import RecordUpdateDTO, VideoSyncRecordDTO

__all__ = [
    "RecordUpdateDTO",
    "VideoSyncRecordDTO",
]
