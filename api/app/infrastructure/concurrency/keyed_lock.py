"""
Lock asincrono por clave.

Motivacion:
- Al formatear items en paralelo, dos videos de la misma serie sin coleccion
  en Zotero podrian crear dos colecciones con el mismo nombre.
- Necesitamos serializar el trabajo por clave (nombre de serie) sin bloquear
  las demas claves.

Caracteristicas:
- Un `asyncio.Lock` por clave, creado bajo demanda
- Limpieza del lock de una clave cuando ya no hace falta serializarla
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from loguru import logger


class KeyedLock:
    """
    Gestor de locks por clave.

    Todo el acceso ocurre dentro del event loop (concurrencia cooperativa),
    por lo que el diccionario de locks no necesita un lock propio.
    """

    def __init__(self, name: str = "keyed") -> None:
        self.name = name
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_or_create_lock(self, key: str) -> asyncio.Lock:
        """Obtiene o crea el lock para la clave especificada."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        """
        Context manager async para adquirir el lock de una clave.

        Ejemplo:
            async with series_locks.lock(series_name):
                ...  # solo una corrutina por serie a la vez
        """
        lock = self._get_or_create_lock(key)
        async with lock:
            yield

    def remove_lock(self, key: str) -> bool:
        """
        Elimina el lock de una clave si no esta adquirido.

        Quien ya espera el lock eliminado lo adquiere igual; las llamadas
        nuevas crean otro.

        Returns:
            True si se elimino el lock, False si no existia o esta en uso
        """
        lock = self._locks.get(key)
        if lock is None:
            return False
        if lock.locked():
            logger.debug(f"[{self.name}] Lock de '{key}' en uso, no se elimina")
            return False
        del self._locks[key]
        return True
