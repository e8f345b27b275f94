"""
Dependencias para inyección de repositorios y escritores.
"""
from functools import lru_cache

from app.application.services.collection_catalog import PARENT_COLLECTIONS, SeriesCollectionResolver
from app.api.v1.dependencies.client_deps import (
    get_airtable_client,
    get_airtable_limiter,
    get_response_cache,
    get_timezone,
    get_zotero_client,
)
from app.core.config import settings
from app.infrastructure.external.airtable.esovdb_repository import EsovdbRepository
from app.infrastructure.external.zotero.zotero_writer import ZoteroWriter


@lru_cache
def get_esovdb_repository() -> EsovdbRepository:
    """
    Dependencia para obtener el repositorio de la ESOVDB.

    Returns:
        EsovdbRepository: Instancia compartida (usa el limitador de Airtable)
    """
    return EsovdbRepository(
        get_airtable_client(),
        get_airtable_limiter(),
        get_response_cache(),
        videos_table=settings.AIRTABLE_VIDEOS_TABLE,
        series_table=settings.AIRTABLE_SERIES_TABLE,
        view=settings.AIRTABLE_VIEW or None,
        batch_size=settings.BATCH_SIZE,
        tz=get_timezone(),
    )


@lru_cache
def get_zotero_writer() -> ZoteroWriter:
    """
    Dependencia para obtener el escritor de Zotero.

    Returns:
        ZoteroWriter: Instancia compartida (usa el limitador de Zotero)
    """
    return ZoteroWriter(
        get_zotero_client(),
        parent_collections=PARENT_COLLECTIONS,
        failed_items_path=settings.FAILED_ITEMS_PATH,
        max_batch_size=settings.BATCH_SIZE,
    )


@lru_cache
def get_series_resolver() -> SeriesCollectionResolver:
    """
    Resolver de colecciones de serie compartido por todas las pasadas de sync,
    para que dos requests concurrentes no creen la misma serie dos veces.
    """
    return SeriesCollectionResolver(get_zotero_writer(), get_esovdb_repository())
