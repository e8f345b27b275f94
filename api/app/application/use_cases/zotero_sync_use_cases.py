"""
Casos de uso del sync ESOVDB -> Zotero.

Una pasada completa:
1. Plantilla videoRecording (una sola para todo el lote)
2. Formateo de todos los videos (pool acotado, orden preservado)
3. Escritura en Zotero en lotes de 50, secuenciales, con pausa entre lotes
4. Parches de back-sync (Zotero Key / Zotero Version) por item escrito
5. Solo en creaciones: aviso en Discord de cada item nuevo
6. Back-sync a la tabla Videos

Si Zotero acepta items pero la ESOVDB no se actualiza, los items quedan
en Zotero (no hay borrado compensatorio): se registra un error con las
keys y los ids afectados y el resultado es BACK_SYNC_FAILED.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from loguru import logger

from app.application.dto.video_dto import VideoSyncRecordDTO
from app.application.services.item_formatter import ItemFormatter
from app.domain.entities.video import (
    FailedItem,
    PreparedItem,
    RecordUpdate,
    SyncOperation,
    SyncResult,
    SyncStatus,
    WrittenItem,
)
from app.infrastructure.concurrency import gather_bounded
from app.infrastructure.external.airtable.esovdb_repository import EsovdbRepository
from app.infrastructure.external.airtable.video_mappings import zotero_token_fields
from app.infrastructure.external.discord.discord_client import DiscordClient
from app.infrastructure.external.zotero.zotero_writer import ZoteroWriter
from app.shared.exceptions.base import AppException
from app.shared.exceptions.domain import UpstreamApiException, ValidationException
from app.shared.utils.batching import MAX_BATCH_SIZE, chunked, describe_range


class ZoteroSyncUseCases:
    """
    Reconciliador entre la ESOVDB y Zotero.
    """

    def __init__(
        self,
        repository: EsovdbRepository,
        writer: ZoteroWriter,
        formatter: ItemFormatter,
        notifier: DiscordClient,
        *,
        batch_size: int = MAX_BATCH_SIZE,
        chunk_delay_s: float = 10.0,
        format_concurrency: int = 4,
        notify_throttle_threshold: int = 30,
        notify_throttle_s: float = 2.0,
    ):
        self.repository = repository
        self.writer = writer
        self.formatter = formatter
        self.notifier = notifier
        self.batch_size = min(batch_size, MAX_BATCH_SIZE)
        self.chunk_delay_s = chunk_delay_s
        self.format_concurrency = format_concurrency
        self.notify_throttle_threshold = notify_throttle_threshold
        self.notify_throttle_s = notify_throttle_s

    async def sync_all(self, records: Sequence[VideoSyncRecordDTO], operation: SyncOperation) -> SyncResult:
        """
        Sincroniza un lote de videos con Zotero y guarda los tokens en la ESOVDB.

        Args:
            records: Videos a crear o actualizar
            operation: CREATE (avisa en Discord) o UPDATE

        Returns:
            SyncResult con el estado y los conteos agregados.

        Raises:
            ValidationException: Si no hay videos.
            UpstreamApiException: Si falla la plantilla, o si todos los lotes fallan.
        """
        if not records:
            raise ValidationException("No hay videos para sincronizar", field="records")

        logger.info(f"Iniciando sync ({operation.value}) de {len(records)} video(s)")
        template = await self.writer.get_template()

        items: List[PreparedItem] = await gather_bounded(
            [lambda record=record: self.formatter.format_item(record, template) for record in records],
            max_concurrent=self.format_concurrency,
        )
        updates = sum(1 for item in items if item.is_update)
        logger.info(f"{len(items) - updates} creacion(es) y {updates} actualizacion(es) preparadas")

        result = SyncResult(operation=operation, status=SyncStatus.NOTHING_PROCESSED, total_items=len(items))
        written: List[WrittenItem] = []
        failed: List[FailedItem] = []
        first_error: Optional[UpstreamApiException] = None

        chunks = list(chunked(items, self.batch_size))
        for index, chunk in enumerate(chunks):
            logger.info(
                f"Enviando item(s) {describe_range(index, len(chunk), len(items), self.batch_size)} a Zotero..."
            )
            try:
                outcome = await self.writer.write_items(chunk)
            except UpstreamApiException as e:
                # El lote completo se da por fallido; los demas lotes siguen
                logger.error(f"Fallo la escritura del lote {index + 1}/{len(chunks)}: {e.message}")
                first_error = first_error or e
                failed.extend(
                    FailedItem(item.record_id, e.upstream_status, e.message, item.payload) for item in chunk
                )
            else:
                written.extend(outcome.successful)
                result.unchanged += len(outcome.unchanged)
                failed.extend(outcome.failed)

            if index < len(chunks) - 1 and self.chunk_delay_s > 0:
                await asyncio.sleep(self.chunk_delay_s)

        result.successful = len(written)
        result.failed = len(failed)
        result.failed_record_ids = [f.record_id for f in failed]
        if failed:
            # Un solo archivo por pasada, con todos los fallidos (incluye lotes rechazados completos)
            self.writer.write_failed_artifact(failed)
        self._log_summary(result)

        if not written:
            if first_error is not None:
                raise first_error
            logger.warning("Ningun item fue escrito en Zotero")
            return result

        patches = [
            RecordUpdate(id=item.record_id, fields=zotero_token_fields(item.key, item.version))
            for item in written
        ]

        if operation == SyncOperation.CREATE:
            result.notified = await self._notify(written)

        try:
            await self.repository.update_records(self.repository.videos_table, patches)
        except AppException as e:
            orphaned = ", ".join(f"{p.id}->{p.fields}" for p in patches)
            logger.error(
                f"Zotero acepto {len(patches)} item(s) pero la ESOVDB no se actualizo: {e.message}. "
                f"Items sin back-sync: {orphaned}"
            )
            result.status = SyncStatus.BACK_SYNC_FAILED
            result.error = e.message
            return result

        logger.success(f"{len(patches)} token(s) Zotero sincronizados con la ESOVDB")
        result.status = SyncStatus.SYNCED
        result.synced = patches
        return result

    async def _notify(self, written: List[WrittenItem]) -> int:
        """Publica cada item nuevo en Discord. Retorna cuantos se publicaron."""
        logger.info(f"Publicando {len(written)} item(s) nuevo(s) en Discord...")
        throttle = len(written) > self.notify_throttle_threshold
        sent = 0
        for item in written:
            if await self.notifier.send_new_video(item.data):
                sent += 1
            if throttle and self.notify_throttle_s > 0:
                await asyncio.sleep(self.notify_throttle_s)
        if sent:
            logger.success(f"{sent} item(s) publicados en Discord")
        return sent

    @staticmethod
    def _log_summary(result: SyncResult) -> None:
        logger.info("Resumen de Zotero:")
        if result.successful:
            logger.info(f"  [{result.successful}] item(s) creados o actualizados")
        if result.unchanged:
            logger.info(f"  [{result.unchanged}] item(s) sin cambios")
        if result.failed:
            logger.info(f"  [{result.failed}] item(s) fallidos")
