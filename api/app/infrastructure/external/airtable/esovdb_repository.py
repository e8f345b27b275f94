"""
Repositorio de la ESOVDB sobre Airtable.

Responsabilidades:
- Listado paginado de Videos (cache en disco + paginas secuenciales)
- Actualizacion generica de registros en lotes de 50 (back-sync)

Todas las llamadas a Airtable pasan por el RateLimiter compartido y se
ejecutan en un thread (el cliente usa `requests`, que es bloqueante).
"""

from __future__ import annotations

import asyncio
from datetime import tzinfo
from typing import Any, AsyncIterator, Optional, Sequence, Union

from loguru import logger

from app.domain.entities.video import RecordUpdate, VideoListResult, VideoQuery
from app.infrastructure.cache import ResponseCache, build_cache_key
from app.infrastructure.concurrency import RateLimiter
from app.shared.exceptions.domain import ValidationException
from app.shared.utils.batching import MAX_BATCH_SIZE, chunked, describe_range

from .airtable_client import AirtableClient
from .types import AirtableRecord, build_created_after_formula, build_modified_after_formula
from .video_mappings import DEFAULT_SORT, MODIFIED_FIELD, VIDEO_FIELDS, project_video, series_key_fields


UpdateLike = Union[RecordUpdate, dict[str, Any]]


def build_filter_formula(query: VideoQuery) -> Optional[str]:
    """
    Predicado server-side de la consulta.

    Airtable recibe un solo filterByFormula: si vienen ambos filtros,
    el de creacion reemplaza al de modificacion.
    """
    formula = None
    if query.modified_after:
        formula = build_modified_after_formula(MODIFIED_FIELD, query.modified_after)
    if query.created_after:
        formula = build_created_after_formula(query.created_after)
    return formula


def _to_update_dict(update: UpdateLike) -> dict[str, Any]:
    if isinstance(update, RecordUpdate):
        return update.to_dict()
    if not isinstance(update, dict) or not update.get("id") or not isinstance(update.get("fields"), dict):
        raise ValidationException("Cada actualizacion debe tener 'id' y 'fields'", field="id")
    return {"id": update["id"], "fields": update["fields"]}


class EsovdbRepository:
    """
    Acceso a las tablas Videos y Series de la ESOVDB.
    """

    def __init__(
        self,
        client: AirtableClient,
        limiter: RateLimiter,
        cache: ResponseCache,
        *,
        videos_table: str = "Videos",
        series_table: str = "Series",
        view: Optional[str] = None,
        batch_size: int = MAX_BATCH_SIZE,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._client = client
        self._limiter = limiter
        self._cache = cache
        self._videos_table = videos_table
        self._series_table = series_table
        self._view = view
        self._batch_size = min(batch_size, MAX_BATCH_SIZE)
        self._tz = tz

    @property
    def videos_table(self) -> str:
        return self._videos_table

    @property
    def series_table(self) -> str:
        return self._series_table

    async def iter_pages(self, query: VideoQuery) -> AsyncIterator[list[AirtableRecord]]:
        """
        Recorre las paginas de Videos que cumplen la consulta, una por yield.

        Las paginas se piden en secuencia: la siguiente depende del offset
        de la anterior. Para reiniciar el recorrido se vuelve a invocar.
        """
        offset: Optional[str] = None
        while True:
            page = await self._limiter.schedule(
                asyncio.to_thread,
                self._client.list_page,
                self._videos_table,
                page_size=query.page_size,
                offset=offset,
                view=self._view,
                fields=VIDEO_FIELDS,
                sort=DEFAULT_SORT,
                filter_formula=build_filter_formula(query),
                max_records=query.max_records,
            )
            yield page.records
            offset = page.offset
            if not offset:
                break

    async def list_videos(self, query: VideoQuery) -> VideoListResult:
        """
        Lista videos proyectados, usando la cache de respuestas.

        - Hit: retorna el resultado cacheado sin llamar a Airtable.
        - Miss: recorre todas las paginas, y solo si el recorrido termina
          sin errores guarda el resultado completo como una sola entrada.

        Si la consulta pide una pagina, se retornan solo sus filas, pero el
        recorrido (y la cache) cubre el resultado completo.

        Raises:
            AirtableApiError: Si falla cualquier pagina (no se escribe cache).
        """
        logger.info(f"Consultando videos {query.describe()}...")
        cache_key = build_cache_key(query.route_path, query.cache_params())

        cached = self._cache.read(cache_key)
        if cached is not None:
            logger.info(f"Cache hit para {cache_key}")
            return VideoListResult(
                rows=query.select_page(cached),
                total_records=len(cached),
                from_cache=True,
            )

        logger.info(f"Cache miss para {cache_key}, consultando Airtable")
        rows: list[dict[str, Any]] = []
        page_number = 0

        async for records in self.iter_pages(query):
            page_number += 1
            projected = [project_video(r, self._tz) for r in records]
            if query.max_records is not None:
                projected = projected[: max(0, query.max_records - len(rows))]

            first = (page_number - 1) * query.page_size + 1
            logger.debug(f"Pagina {page_number}: registros {first}-{first + len(projected) - 1}")
            rows.extend(projected)

            if query.page == page_number:
                logger.info(f"Pagina {page_number} alcanzada ({len(projected)} registros)")

            if query.max_records is not None and len(rows) >= query.max_records:
                break

        logger.success(f"[DONE] {len(rows)} videos obtenidos en {page_number} pagina(s)")
        self._cache.write(cache_key, rows)
        return VideoListResult(rows=query.select_page(rows), total_records=len(rows))

    async def update_records(self, table_name: str, updates: Sequence[UpdateLike]) -> list[AirtableRecord]:
        """
        Actualiza registros de forma no destructiva, en lotes de como maximo 50.

        Args:
            table_name: Tabla destino (Videos, Series)
            updates: [{"id": "recXXXX", "fields": {...}}, ...] o RecordUpdate

        Returns:
            Registros actualizados, en el orden de entrada.

        Raises:
            ValidationException: Si no hay actualizaciones.
            AirtableApiError: Si falla un lote (los lotes previos ya quedaron aplicados).
        """
        if not updates:
            raise ValidationException("No hay registros para actualizar", field="updates")

        payload = [_to_update_dict(u) for u in updates]
        total = len(payload)
        updated: list[AirtableRecord] = []

        for index, batch in enumerate(chunked(payload, self._batch_size)):
            logger.info(
                f"Actualizando registro(s) {describe_range(index, len(batch), total, self._batch_size)} "
                f"en {table_name}..."
            )
            records = await self._limiter.schedule(
                asyncio.to_thread, self._client.update_records, table_name, batch
            )
            updated.extend(records)

        logger.success(f"{len(updated)} registro(s) actualizados en {table_name}")
        return updated

    async def update_series_collection(self, series_id: str, collection_key: str) -> None:
        """Guarda en la tabla Series la coleccion Zotero creada para la serie."""
        await self.update_records(
            self._series_table,
            [RecordUpdate(id=series_id, fields=series_key_fields(collection_key))],
        )
