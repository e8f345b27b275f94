"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends

from app.api.v1.dependencies.client_deps import get_discord_client, get_response_cache, get_timezone
from app.api.v1.dependencies.repository_deps import (
    get_esovdb_repository,
    get_series_resolver,
    get_zotero_writer,
)
from app.application.services.collection_catalog import SeriesCollectionResolver
from app.application.services.item_formatter import ItemFormatter
from app.application.use_cases.video_use_cases import VideoUseCases
from app.application.use_cases.zotero_sync_use_cases import ZoteroSyncUseCases
from app.core.config import settings
from app.infrastructure.cache import ResponseCache
from app.infrastructure.external.airtable.esovdb_repository import EsovdbRepository
from app.infrastructure.external.discord.discord_client import DiscordClient
from app.infrastructure.external.zotero.zotero_writer import ZoteroWriter


def get_video_use_cases(
    repository: EsovdbRepository = Depends(get_esovdb_repository),
    cache: ResponseCache = Depends(get_response_cache),
) -> VideoUseCases:
    """
    Dependencia para obtener los casos de uso de videos.

    Returns:
        VideoUseCases: Instancia de casos de uso de videos
    """
    return VideoUseCases(repository, cache)


def get_zotero_sync_use_cases(
    repository: EsovdbRepository = Depends(get_esovdb_repository),
    writer: ZoteroWriter = Depends(get_zotero_writer),
    resolver: SeriesCollectionResolver = Depends(get_series_resolver),
    notifier: DiscordClient = Depends(get_discord_client),
) -> ZoteroSyncUseCases:
    """
    Dependencia para obtener los casos de uso del sync con Zotero.

    Returns:
        ZoteroSyncUseCases: Instancia de casos de uso de sync
    """
    formatter = ItemFormatter(
        resolver,
        archive_name=settings.ESOVDB_ARCHIVE_NAME,
        record_url=settings.ESOVDB_RECORD_URL,
        tz=get_timezone(),
    )
    return ZoteroSyncUseCases(
        repository,
        writer,
        formatter,
        notifier,
        batch_size=settings.BATCH_SIZE,
        chunk_delay_s=settings.ZOTERO_CHUNK_DELAY_S,
        format_concurrency=settings.FORMAT_CONCURRENCY,
        notify_throttle_threshold=settings.NOTIFY_THROTTLE_THRESHOLD,
        notify_throttle_s=settings.NOTIFY_THROTTLE_S,
    )
