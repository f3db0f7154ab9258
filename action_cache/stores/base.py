"""
Cache store contract.
"""

from abc import ABC, abstractmethod
from typing import Callable

from action_cache_shared.errors import SerializationError
from ..options import CacheOptions

Populate = Callable[[], bytes]


class CacheStore(ABC):
    """
    Fetch-or-populate key/value store for serialized contexts.

    ``fetch`` returns the stored blob for an unexpired key without calling
    ``populate``. Otherwise it calls ``populate`` exactly once, stores the
    returned blob and returns it. When ``populate`` raises, nothing is stored
    and the exception propagates unchanged.
    """

    name: str = "abstract"

    @abstractmethod
    def fetch(self, key: str, options: CacheOptions, populate: Populate) -> bytes:
        """Return the cached blob for ``key`` or populate it."""

    def physical_key(self, key: str, options: CacheOptions) -> str:
        """Apply the ``namespace`` option."""
        namespace = options.namespace
        return f"{namespace}:{key}" if namespace else key

    def _run_populate(self, key: str, populate: Populate) -> bytes:
        blob = populate()
        if not isinstance(blob, (bytes, bytearray)):
            raise SerializationError(
                "Populate must return bytes",
                details={"key": key, "store": self.name, "type": type(blob).__name__}
            )
        return bytes(blob)
