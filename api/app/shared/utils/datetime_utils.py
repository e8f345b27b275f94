"""
Utilidades para manejo de fechas y horas.
"""
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger


class DateTimeUtils:
    """Clase de utilidades para operaciones con fechas y horas."""

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """
        Normaliza datetime a UTC (aware).

        Un datetime naive se interpreta como UTC.
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def to_iso_z(dt: datetime) -> str:
        """
        Serializa datetime a ISO 8601 en UTC con sufijo 'Z' y sin microsegundos.

        Es el formato que aceptan las formulas de Airtable y el que se usa
        en las firmas de cache.
        """
        dt_utc = DateTimeUtils.ensure_utc(dt)
        return dt_utc.replace(microsecond=0).isoformat().replace("+00:00", "Z")

    @staticmethod
    def from_iso_string(iso_string: str) -> Optional[datetime]:
        """
        Convierte un string ISO 8601 a datetime.

        Args:
            iso_string: String en formato ISO 8601 (acepta sufijo 'Z')

        Returns:
            Optional[datetime]: Objeto datetime o None si hay error
        """
        try:
            return datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
        except (ValueError, TypeError, AttributeError):
            return None

    @staticmethod
    def resolve_timezone(name: str) -> Optional[tzinfo]:
        """
        Resuelve un nombre IANA (ej: 'America/New_York').

        Retorna None (hora local del servidor) si el nombre esta vacio o no existe.
        """
        if not name:
            return None
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Zona horaria desconocida '{name}', se usa la hora local")
            return None
