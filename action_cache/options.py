"""
Per-action-type cache configuration.

Each cached action type owns exactly one ``CacheConfig``: a key generator and
the ``CacheOptions`` handed to the store. Configs are assembled with
``CacheConfigBuilder`` when the action type is defined and are frozen from then
on.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Union

from action_cache_shared.errors import ConfigurationError
from .context import ActionContext

KeyGenerator = Callable[[ActionContext], str]
Duration = Union[int, float, timedelta]


def to_seconds(duration: Optional[Duration]) -> Optional[float]:
    """Normalize a duration to positive seconds; ``None`` means no expiry."""
    if duration is None:
        return None
    if isinstance(duration, timedelta):
        seconds = duration.total_seconds()
    elif isinstance(duration, (int, float)) and not isinstance(duration, bool):
        seconds = float(duration)
    else:
        raise ConfigurationError(
            "expires_in must be a number of seconds or a timedelta",
            details={"value": repr(duration)}
        )
    if seconds <= 0:
        raise ConfigurationError("expires_in must be positive", details={"seconds": seconds})
    return seconds


@dataclass(frozen=True)
class CacheOptions:
    """Options passed to the store on every fetch."""

    expires_in: Optional[float] = None
    extras: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, name: str, default: Any = None) -> Any:
        if name == "expires_in":
            return self.expires_in
        return self.extras.get(name, default)

    @property
    def namespace(self) -> Optional[str]:
        return self.extras.get("namespace")

    @property
    def force(self) -> bool:
        return bool(self.extras.get("force", False))

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extras)
        if self.expires_in is not None:
            data["expires_in"] = self.expires_in
        return data


@dataclass(frozen=True)
class CacheConfig:
    """Key generator plus store options for one action type."""

    key_generator: KeyGenerator
    options: CacheOptions = field(default_factory=CacheOptions)


class CacheConfigBuilder:
    """
    Collects cache settings for an action type and validates them once.

    ``cache_options`` merges into whatever was set before, key by key, so
    ``expires_in(60)`` followed by ``cache_options(namespace="greet")`` keeps
    both. Later writes to the same option win.
    """

    def __init__(self):
        self._key_generator: Optional[KeyGenerator] = None
        self._expires_in: Optional[float] = None
        self._extras: Dict[str, Any] = {}

    def cache_key(self, generator: KeyGenerator) -> "CacheConfigBuilder":
        """Set the function deriving the cache key from a context."""
        if not callable(generator):
            raise ConfigurationError("Cache key generator must be callable")
        self._key_generator = generator
        return self

    def expires_in(self, duration: Optional[Duration]) -> "CacheConfigBuilder":
        """Set entry lifetime; ``None`` leaves expiry to the store."""
        self._expires_in = to_seconds(duration)
        return self

    def cache_options(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "CacheConfigBuilder":
        """Merge backend options into the current set."""
        merged = dict(options or {})
        merged.update(kwargs)
        if "expires_in" in merged:
            self.expires_in(merged.pop("expires_in"))
        self._extras.update(merged)
        return self

    def build(self) -> CacheConfig:
        if self._key_generator is None:
            raise ConfigurationError("A cache key generator is required to cache an action")
        return CacheConfig(
            key_generator=self._key_generator,
            options=CacheOptions(
                expires_in=self._expires_in,
                extras=MappingProxyType(dict(self._extras))
            )
        )
