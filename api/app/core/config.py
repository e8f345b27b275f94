"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.
Soporta configuracion dinamica para desarrollo (ENVIRONMENT=development)
y produccion (ENVIRONMENT=production).
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    Integraciones:
    - Airtable (ESOVDB): origen de los videos, tablas Videos y Series
    - Zotero: biblioteca de grupo destino (Web API v3)
    - Discord: webhook para anunciar videos nuevos
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="ESOVDB Zotero Sync")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Airtable (ESOVDB)
    AIRTABLE_API_KEY: str = Field(default="")
    AIRTABLE_BASE_ID: str = Field(default="")
    AIRTABLE_VIDEOS_TABLE: str = Field(default="Videos")
    AIRTABLE_SERIES_TABLE: str = Field(default="Series")
    AIRTABLE_VIEW: str = Field(default="All Online Videos")
    # 1005 / 5 ms: justo bajo el limite de 5 req/s de Airtable
    AIRTABLE_RATE_LIMIT_MS: float = Field(default=201.0)
    AIRTABLE_TIMEOUT_S: int = Field(default=30)

    # Zotero
    ZOTERO_API_KEY: str = Field(default="")
    # Biblioteca de grupo; si ZOTERO_GROUP esta vacio se usa ZOTERO_USER
    ZOTERO_GROUP: str = Field(default="")
    ZOTERO_USER: str = Field(default="")
    ZOTERO_RATE_LIMIT_MS: float = Field(default=200.0)
    # Pausa fija entre lotes de escritura (limite de rafaga de Zotero)
    ZOTERO_CHUNK_DELAY_S: float = Field(default=10.0)
    ZOTERO_TIMEOUT_S: int = Field(default=30)

    # Discord
    DISCORD_WEBHOOK_URL: str = Field(default="")
    NOTIFY_THROTTLE_THRESHOLD: int = Field(default=30)
    NOTIFY_THROTTLE_S: float = Field(default=2.0)

    # Sync
    BATCH_SIZE: int = Field(default=50)
    FORMAT_CONCURRENCY: int = Field(default=4)
    CACHE_DIR: str = Field(default=".cache")
    FAILED_ITEMS_PATH: str = Field(default="failed.json")
    # Zona horaria para fechas de acceso en Zotero (vacio = hora local del servidor)
    TIMEZONE: str = Field(default="")
    ESOVDB_ARCHIVE_NAME: str = Field(default="Earth Science Online Video Database")
    ESOVDB_RECORD_URL: str = Field(
        default="https://airtable.com/tbl3WP689vHdmg7P2/viwD9Tpr6JAAr97CW/"
    )

    # Seguridad: patrones IP separados por espacio, con comodines (*)
    IP_WHITELIST: str = Field(default="")

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def zotero_library_path(self) -> str:
        """
        Retorna el prefijo de la biblioteca Zotero.
        Por defecto es una biblioteca de grupo; para una biblioteca
        personal se deja ZOTERO_GROUP vacio y se define ZOTERO_USER.
        """
        if self.ZOTERO_GROUP:
            return f"groups/{self.ZOTERO_GROUP}"
        return f"users/{self.ZOTERO_USER}"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


# Instancia global de configuracion
settings = Settings()
