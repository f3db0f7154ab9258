"""
Registry of cache configuration per action type.
"""

import threading
from typing import Any, Callable, Dict, Hashable, Optional, TypeVar

from action_cache_shared.errors import ConfigurationError
from action_cache_shared.logging import get_logger
from .options import CacheConfig, CacheConfigBuilder, Duration, KeyGenerator

T = TypeVar("T")


def action_name(action_type: Hashable) -> str:
    """Readable name of an action type for logs and metric labels."""
    return getattr(action_type, "__qualname__", None) or str(action_type)


class ActionCacheRegistry:
    """Maps action types (classes, functions or names) to their ``CacheConfig``."""

    def __init__(self):
        self.logger = get_logger("action_cache.registry")
        self._configs: Dict[Hashable, CacheConfig] = {}
        self._lock = threading.Lock()

    def register(self, action_type: Hashable, config: CacheConfig, replace: bool = False) -> CacheConfig:
        """Attach ``config`` to ``action_type``."""
        if not isinstance(config, CacheConfig):
            raise ConfigurationError(
                "Expected a CacheConfig",
                details={"action": action_name(action_type), "type": type(config).__name__}
            )
        with self._lock:
            if action_type in self._configs and not replace:
                raise ConfigurationError(
                    f"Action {action_name(action_type)} already has a cache configuration",
                    details={"action": action_name(action_type)}
                )
            self._configs[action_type] = config

        self.logger.debug(
            "Registered cached action",
            action=action_name(action_type),
            options=config.options.to_dict()
        )
        return config

    def unregister(self, action_type: Hashable) -> bool:
        with self._lock:
            return self._configs.pop(action_type, None) is not None

    def get(self, action_type: Hashable) -> Optional[CacheConfig]:
        return self._configs.get(action_type)

    def cached(
        self,
        key: KeyGenerator,
        expires_in: Optional[Duration] = None,
        **options: Any
    ) -> Callable[[T], T]:
        """
        Decorator registering the decorated class or function as a cached action.

        Examples

            @registry.cached(lambda ctx: f"greet:{ctx.name}", expires_in=60)
            class Greet:
                ...
        """
        config = (
            CacheConfigBuilder()
            .cache_key(key)
            .expires_in(expires_in)
            .cache_options(options)
            .build()
        )

        def decorator(action_type: T) -> T:
            self.register(action_type, config)
            return action_type

        return decorator

    def __contains__(self, action_type: Hashable) -> bool:
        return action_type in self._configs

    def __len__(self) -> int:
        return len(self._configs)
