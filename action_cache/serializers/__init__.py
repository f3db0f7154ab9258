"""
Context serializers.

A serializer turns the fields of an ``ActionContext`` into bytes for a cache
store and back. ``PickleSerializer`` is the default; ``JsonSerializer`` trades
value coverage for a portable, inspectable payload.
"""

from typing import Dict, Type

from action_cache_shared.errors import ConfigurationError
from .base import ContextSerializer
from .json_serializer import JsonSerializer
from .pickle_serializer import PickleSerializer

SERIALIZERS: Dict[str, Type[ContextSerializer]] = {
    "pickle": PickleSerializer,
    "marshal": PickleSerializer,
    "json": JsonSerializer,
}


def get_serializer(name: str) -> ContextSerializer:
    """Instantiate a serializer by its configured name."""
    try:
        return SERIALIZERS[name.lower()]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown serializer: {name}",
            details={"available": sorted(SERIALIZERS)}
        ) from None


__all__ = [
    "ContextSerializer",
    "JsonSerializer",
    "PickleSerializer",
    "SERIALIZERS",
    "get_serializer",
]
