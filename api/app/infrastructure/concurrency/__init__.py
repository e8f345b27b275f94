"""
Primitivas de concurrencia compartidas por los clientes externos y el pipeline de sync.
"""
from .keyed_lock import KeyedLock
from .rate_limiter import RateLimiter
from .task_pool import gather_bounded

__all__ = [
    "KeyedLock",
    "RateLimiter",
    "gather_bounded",
]
