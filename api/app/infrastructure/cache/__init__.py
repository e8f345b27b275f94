from .response_cache import ResponseCache, build_cache_key

__all__ = ["ResponseCache", "build_cache_key"]
