"""
Tests unitarios para rate_limiter.py.

Propiedades:
- Orden FIFO segun el orden de envio
- Inicios consecutivos separados por al menos el intervalo minimo
- Los errores de la operacion se propagan sin cambios
"""
from __future__ import annotations

import asyncio
from typing import List

import pytest

from app.infrastructure.concurrency import RateLimiter


@pytest.mark.asyncio
async def test_runs_in_submission_order() -> None:
    limiter = RateLimiter(0.01, name="test")
    order: List[int] = []

    async def work(i: int) -> int:
        order.append(i)
        return i

    results = await asyncio.gather(*(limiter.schedule(work, i) for i in range(6)))

    assert order == list(range(6))
    assert results == list(range(6))
    assert limiter.scheduled_count == 6


@pytest.mark.asyncio
async def test_consecutive_starts_respect_interval() -> None:
    interval = 0.03
    limiter = RateLimiter(interval, name="test")
    loop = asyncio.get_running_loop()
    starts: List[float] = []

    def work() -> None:
        starts.append(loop.time())

    await asyncio.gather(*(limiter.schedule(work) for _ in range(4)))

    gaps = [b - a for a, b in zip(starts, starts[1:])]
    # Tolerancia minima por la resolucion del reloj del loop
    assert all(gap >= interval - 0.005 for gap in gaps)


@pytest.mark.asyncio
async def test_sync_function_result_is_returned() -> None:
    limiter = RateLimiter(0)
    assert await limiter.schedule(lambda a, b: a + b, 2, b=3) == 5


@pytest.mark.asyncio
async def test_blocking_call_through_to_thread() -> None:
    limiter = RateLimiter(0)
    assert await limiter.schedule(asyncio.to_thread, sum, [1, 2, 3]) == 6


@pytest.mark.asyncio
async def test_errors_pass_through_and_limiter_keeps_working() -> None:
    limiter = RateLimiter(0)

    async def boom() -> None:
        raise RuntimeError("upstream")

    with pytest.raises(RuntimeError, match="upstream"):
        await limiter.schedule(boom)

    assert await limiter.schedule(lambda: "ok") == "ok"


def test_negative_interval_is_clamped() -> None:
    assert RateLimiter(-1).min_interval_s == 0.0
