"""
In-process cache store with per-entry expiry.
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional

from action_cache_shared.logging import get_logger
from ..options import CacheOptions
from .base import CacheStore, Populate


@dataclass(frozen=True)
class MemoryEntry:
    """One stored blob."""
    blob: bytes
    expires_at: Optional[float]

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class MemoryCacheStore(CacheStore):
    """
    Thread-safe dictionary store.

    With ``single_flight=True`` concurrent fetches of the same missing key are
    serialized on a per-key lock, so ``populate`` runs once and the other
    callers read the stored entry. If that populate fails, the next waiter
    runs its own. A per-key lock lives only while some caller holds or waits
    on it.
    """

    name = "memory"

    def __init__(self, single_flight: bool = False, clock: Callable[[], float] = time.monotonic):
        self.single_flight = single_flight
        self.clock = clock
        self.logger = get_logger("action_cache.stores.memory")

        self._entries: Dict[str, MemoryEntry] = {}
        self._lock = threading.Lock()
        self._key_locks: Dict[str, _KeyLock] = {}

    def fetch(self, key: str, options: CacheOptions, populate: Populate) -> bytes:
        physical = self.physical_key(key, options)

        if not options.force:
            blob = self._read(physical)
            if blob is not None:
                return blob

        if not self.single_flight:
            return self._populate(physical, options, populate)

        with self._key_lock(physical):
            if not options.force:
                blob = self._read(physical)
                if blob is not None:
                    return blob
            return self._populate(physical, options, populate)

    def _populate(self, physical: str, options: CacheOptions, populate: Populate) -> bytes:
        blob = self._run_populate(physical, populate)
        expires_at = None
        if options.expires_in is not None:
            expires_at = self.clock() + options.expires_in
        with self._lock:
            self._entries[physical] = MemoryEntry(blob=blob, expires_at=expires_at)
        self.logger.debug("Stored entry", key=physical, expires_in=options.expires_in)
        return blob

    def _read(self, physical: str) -> Optional[bytes]:
        with self._lock:
            entry = self._entries.get(physical)
            if entry is None:
                return None
            if entry.is_expired(self.clock()):
                del self._entries[physical]
                return None
            return entry.blob

    @contextmanager
    def _key_lock(self, physical: str) -> Iterator[None]:
        with self._lock:
            key_lock = self._key_locks.get(physical)
            if key_lock is None:
                key_lock = self._key_locks[physical] = _KeyLock()
            key_lock.holders += 1
        try:
            with key_lock.lock:
                yield
        finally:
            with self._lock:
                key_lock.holders -= 1
                if key_lock.holders == 0:
                    del self._key_locks[physical]

    def exists(self, key: str, options: Optional[CacheOptions] = None) -> bool:
        return self._read(self.physical_key(key, options or CacheOptions())) is not None

    def delete(self, key: str, options: Optional[CacheOptions] = None) -> bool:
        physical = self.physical_key(key, options or CacheOptions())
        with self._lock:
            return self._entries.pop(physical, None) is not None

    def clear(self) -> int:
        with self._lock:
            cleared = len(self._entries)
            self._entries.clear()
        return cleared

    def __len__(self) -> int:
        now = self.clock()
        with self._lock:
            return sum(1 for entry in self._entries.values() if not entry.is_expired(now))
