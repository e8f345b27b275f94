"""
Dependencias para los clientes externos y los recursos compartidos del proceso.

Los limitadores de tasa son estado global: una instancia por API
externa, compartida por todas las requests. Estos proveedores se
cachean con lru_cache (una sola instancia por proceso).
"""
from datetime import tzinfo
from functools import lru_cache
from typing import Optional

from app.core.config import settings
from app.infrastructure.cache import ResponseCache
from app.infrastructure.concurrency import RateLimiter
from app.infrastructure.external.airtable.airtable_client import AirtableClient, AirtableCredentials
from app.infrastructure.external.discord.discord_client import DiscordClient
from app.infrastructure.external.zotero.zotero_client import ZoteroClient
from app.shared.utils.datetime_utils import DateTimeUtils


@lru_cache
def get_airtable_limiter() -> RateLimiter:
    """Limitador compartido de Airtable (~5 req/s)."""
    return RateLimiter(settings.AIRTABLE_RATE_LIMIT_MS / 1000, name="airtable")


@lru_cache
def get_zotero_limiter() -> RateLimiter:
    """Limitador compartido de Zotero."""
    return RateLimiter(settings.ZOTERO_RATE_LIMIT_MS / 1000, name="zotero")


@lru_cache
def get_response_cache() -> ResponseCache:
    return ResponseCache(settings.CACHE_DIR)


@lru_cache
def get_timezone() -> Optional[tzinfo]:
    """Zona horaria de las fechas de acceso (None = hora local)."""
    return DateTimeUtils.resolve_timezone(settings.TIMEZONE)


@lru_cache
def get_airtable_client() -> AirtableClient:
    return AirtableClient(
        AirtableCredentials(token=settings.AIRTABLE_API_KEY, base_id=settings.AIRTABLE_BASE_ID),
        timeout_s=settings.AIRTABLE_TIMEOUT_S,
    )


@lru_cache
def get_zotero_client() -> ZoteroClient:
    return ZoteroClient(
        settings.ZOTERO_API_KEY,
        settings.zotero_library_path,
        get_zotero_limiter(),
        timeout_s=settings.ZOTERO_TIMEOUT_S,
    )


@lru_cache
def get_discord_client() -> DiscordClient:
    return DiscordClient(settings.DISCORD_WEBHOOK_URL)
