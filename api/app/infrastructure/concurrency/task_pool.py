"""
Ejecucion concurrente acotada de corrutinas independientes.

Se usa en la etapa de formateo del sync: cada video se transforma de forma
independiente, pero sin lanzar cientos de corrutinas que compitan a la vez
por los limitadores de tasa.
"""
import asyncio
from typing import Awaitable, Callable, Iterable, List, TypeVar

from loguru import logger


T = TypeVar("T")

# Limite por defecto de corrutinas activas simultaneamente
DEFAULT_MAX_CONCURRENT = 4


async def gather_bounded(
    factories: Iterable[Callable[[], Awaitable[T]]],
    max_concurrent: int = DEFAULT_MAX_CONCURRENT,
) -> List[T]:
    """
    Ejecuta fabricas de corrutinas con un maximo de `max_concurrent` activas.

    Args:
        factories: Callables sin argumentos que retornan un awaitable
        max_concurrent: Maximo de corrutinas en vuelo (minimo 1)

    Returns:
        Resultados en el mismo orden que `factories`.

    El primer error se propaga al caller; las tareas que siguen pendientes
    se cancelan y se esperan antes de propagarlo.
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))
    factories = list(factories)

    async def _run(factory: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await factory()

    logger.debug(f"Ejecutando {len(factories)} tareas (max_concurrent: {max(1, max_concurrent)})")
    tasks = [asyncio.ensure_future(_run(f)) for f in factories]
    try:
        return list(await asyncio.gather(*tasks))
    finally:
        pending = [t for t in tasks if not t.done()]
        if pending:
            logger.warning(f"Cancelando {len(pending)} tarea(s) pendientes tras un error")
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
