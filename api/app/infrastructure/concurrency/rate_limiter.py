"""
Limitador de tasa por API externa.

Motivacion:
- Airtable acepta ~5 req/s por base; Zotero penaliza rafagas.
- Varias rutas (listado, update, sync) pueden llamar a la misma API a la vez.
- Necesitamos un unico punto que ordene y espacie las llamadas salientes.

Caracteristicas:
- Orden FIFO estricto segun el orden de envio
- Dos inicios consecutivos nunca estan separados por menos de `min_interval_s`
- Una instancia por API externa, compartida por todo el proceso e inyectada
  en los clientes (ver app/api/v1/dependencies/client_deps.py)
- Los errores de la operacion envuelta se propagan sin cambios
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Optional

from loguru import logger


class RateLimiter:
    """
    Programador de llamadas salientes con intervalo minimo entre inicios.

    Implementacion:
    - `asyncio.Lock` despierta a sus waiters en orden FIFO, lo que fija
      el orden de ejecucion.
    - El lock solo se retiene mientras se espera el turno; la operacion
      en si corre fuera del lock, como el `minTime` de un scheduler clasico.
    """

    def __init__(self, min_interval_s: float, name: str = "api") -> None:
        self.min_interval_s = max(0.0, float(min_interval_s))
        self.name = name
        self._lock: Optional[asyncio.Lock] = None
        self._last_start: Optional[float] = None
        self._scheduled = 0

    def _get_lock(self) -> asyncio.Lock:
        """
        Obtiene el lock, creandolo si es necesario.

        Se crea lazy para que quede asociado al event loop que lo usa.
        """
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def scheduled_count(self) -> int:
        """Numero de operaciones despachadas (para monitoreo y tests)."""
        return self._scheduled

    async def _wait_turn(self) -> None:
        async with self._get_lock():
            loop = asyncio.get_running_loop()
            if self._last_start is not None:
                wait_s = self._last_start + self.min_interval_s - loop.time()
                if wait_s > 0:
                    await asyncio.sleep(wait_s)
            self._last_start = loop.time()
            self._scheduled += 1

    async def schedule(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Ejecuta `func(*args, **kwargs)` cuando le toque el turno.

        `func` puede ser sincrona o retornar un awaitable; en el segundo caso
        se espera el resultado. Para I/O bloqueante, pasar `asyncio.to_thread`
        como `func` y la funcion bloqueante como primer argumento.

        Ejemplo:
            page = await limiter.schedule(asyncio.to_thread, client.list_page, "Videos", params)
        """
        await self._wait_turn()
        logger.trace(f"[{self.name}] despachando operacion #{self._scheduled}")
        result = func(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
