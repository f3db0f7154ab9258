"""
Cache stores.

Every store implements the fetch-or-populate contract of ``CacheStore``.
``WorthlessCacheStore`` is the default and caches nothing.
"""

from typing import Any, Dict, Type

from action_cache_shared.errors import ConfigurationError
from .base import CacheStore, Populate
from .memory import MemoryCacheStore
from .redis_store import RedisCacheStore
from .worthless import WorthlessCacheStore

STORES: Dict[str, Type[CacheStore]] = {
    "worthless": WorthlessCacheStore,
    "memory": MemoryCacheStore,
    "redis": RedisCacheStore,
}


def get_store(name: str, **kwargs: Any) -> CacheStore:
    """Instantiate a store by its configured name."""
    try:
        store_class = STORES[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown cache store: {name}",
            details={"available": sorted(STORES)}
        ) from None
    return store_class(**kwargs)


__all__ = [
    "CacheStore",
    "MemoryCacheStore",
    "Populate",
    "RedisCacheStore",
    "STORES",
    "WorthlessCacheStore",
    "get_store",
]
