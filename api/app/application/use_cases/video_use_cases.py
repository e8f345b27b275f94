"""
Casos de uso de la tabla Videos: listado y actualizacion.
"""
from typing import List

from app.application.dto.video_dto import RecordUpdateDTO
from app.domain.entities.video import RecordUpdate, VideoListResult, VideoQuery
from app.infrastructure.cache import ResponseCache
from app.infrastructure.external.airtable.esovdb_repository import EsovdbRepository


class VideoUseCases:
    """
    Gestiona la logica de negocio de /videos.
    """

    def __init__(self, repository: EsovdbRepository, cache: ResponseCache):
        self.repository = repository
        self.cache = cache

    async def list_videos(self, query: VideoQuery) -> VideoListResult:
        return await self.repository.list_videos(query)

    async def update_videos(self, updates: List[RecordUpdateDTO]) -> List[dict]:
        """
        Aplica los parches a la tabla Videos.

        Returns:
            Los mismos parches recibidos, una vez aplicados.
        """
        await self.repository.update_records(
            self.repository.videos_table,
            [RecordUpdate(id=u.id, fields=u.fields) for u in updates],
        )
        return [u.model_dump() for u in updates]

    def clear_cache(self) -> int:
        """Vacia la cache de respuestas. Retorna cuantas entradas se borraron."""
        return self.cache.clear()
