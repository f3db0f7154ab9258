"""
Test helper functions and doubles for the action cache layer.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@dataclass
class CountingAction:
    """Action body recording how often it ran."""
    body: Callable[[Any], None]
    calls: int = 0

    def __call__(self, ctx):
        self.calls += 1
        self.body(ctx)


class FakeRedisLock:
    """Process-local stand-in for ``redis.lock.Lock``."""

    def __init__(self, lock: threading.Lock, blocking_timeout: Optional[float] = None):
        self._lock = lock
        self.blocking_timeout = blocking_timeout

    def acquire(self) -> bool:
        timeout = -1 if self.blocking_timeout is None else self.blocking_timeout
        return self._lock.acquire(timeout=timeout)

    def release(self):
        self._lock.release()


class FakeRedisClient:
    """
    Dictionary-backed client implementing the Redis commands the cache store uses.

    Expiry follows ``clock`` so tests can move time forward.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.monotonic
        self.data: Dict[str, Tuple[bytes, Optional[float]]] = {}
        self.commands = []
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        self.commands.append(("get", key))
        with self._guard:
            entry = self.data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self.clock() >= expires_at:
                del self.data[key]
                return None
            return value

    def set(self, key: str, value: bytes, px: Optional[int] = None, ex: Optional[int] = None) -> bool:
        self.commands.append(("set", key))
        ttl = px / 1000.0 if px is not None else ex
        expires_at = self.clock() + ttl if ttl is not None else None
        with self._guard:
            self.data[key] = (value, expires_at)
        return True

    def exists(self, key: str) -> int:
        return int(self.get(key) is not None)

    def delete(self, key: str) -> int:
        with self._guard:
            return int(self.data.pop(key, None) is not None)

    def lock(self, name: str, timeout: Optional[float] = None, blocking_timeout: Optional[float] = None) -> FakeRedisLock:
        with self._guard:
            lock = self._locks.setdefault(name, threading.Lock())
        return FakeRedisLock(lock, blocking_timeout)

    def ping(self) -> bool:
        return True
