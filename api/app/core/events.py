"""
Manejadores de eventos de inicio y cierre de la aplicacion.

Al iniciar se valida la configuracion, se agrega el sink de archivo de
loguru y se preparan los directorios de la cache y del artefacto de items
fallidos. Al cerrar se libera el cliente HTTP de Zotero.
"""
from pathlib import Path
from typing import Callable, List

from fastapi import FastAPI
from loguru import logger

from app.core.config import settings
from app.api.v1.dependencies.client_deps import (
    get_airtable_limiter,
    get_zotero_client,
    get_zotero_limiter,
)


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        try:
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

            for warning in collect_config_warnings():
                logger.warning(f"CONFIG: {warning}")

            logger.add(
                settings.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=settings.LOG_LEVEL
            )

            _prepare_storage()
            _log_sync_settings()

            logger.success("Aplicacion iniciada correctamente")
        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def collect_config_warnings() -> List[str]:
    """Lista las claves criticas que faltan, una advertencia por integracion."""
    warnings = []

    if not settings.AIRTABLE_API_KEY or not settings.AIRTABLE_BASE_ID:
        warnings.append("AIRTABLE_API_KEY / AIRTABLE_BASE_ID no configuradas - /videos y el back-sync no funcionaran")

    if not settings.ZOTERO_API_KEY:
        warnings.append("ZOTERO_API_KEY no configurada - /sync no funcionara")

    if not settings.ZOTERO_GROUP and not settings.ZOTERO_USER:
        warnings.append("ZOTERO_GROUP y ZOTERO_USER vacios - no hay biblioteca Zotero destino")

    if not settings.DISCORD_WEBHOOK_URL:
        warnings.append("DISCORD_WEBHOOK_URL no configurada - no se anunciaran videos nuevos")

    return warnings


def _prepare_storage() -> None:
    cache_dir = Path(settings.CACHE_DIR)
    cache_dir.mkdir(parents=True, exist_ok=True)
    Path(settings.FAILED_ITEMS_PATH).parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Cache de respuestas en {cache_dir.resolve()}")


def _log_sync_settings() -> None:
    logger.info(
        f"Limites: Airtable {get_airtable_limiter().min_interval_s:.3f}s, "
        f"Zotero {get_zotero_limiter().min_interval_s:.3f}s entre requests"
    )
    logger.info(
        f"Zotero: biblioteca '{settings.zotero_library_path}', lotes de {settings.BATCH_SIZE}, "
        f"{settings.ZOTERO_CHUNK_DELAY_S}s entre lotes"
    )


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        logger.info("Cerrando aplicacion...")

        await get_zotero_client().aclose()
        logger.info(
            f"Cliente de Zotero cerrado ({get_zotero_limiter().scheduled_count} request(s) despachadas)"
        )

        logger.success("Aplicacion cerrada correctamente")

    return shutdown
