"""
Null cache store.
"""

from ..options import CacheOptions
from .base import CacheStore, Populate


class WorthlessCacheStore(CacheStore):
    """Never stores anything: every fetch is a miss."""

    name = "worthless"

    def fetch(self, key: str, options: CacheOptions, populate: Populate) -> bytes:
        return self._run_populate(key, populate)
