"""
Redis-backed cache store.
"""

from typing import Any, Optional

import redis
from redis.exceptions import LockError

from action_cache_shared.errors import StoreUnavailableError
from action_cache_shared.logging import get_logger
from ..options import CacheOptions
from .base import CacheStore, Populate


class RedisCacheStore(CacheStore):
    """
    Store blobs in Redis with ``SET ... PX`` expiry.

    Entries are written only after ``populate`` returns. Redis errors are
    raised as ``StoreUnavailableError``; errors raised by ``populate`` are not
    touched. ``single_flight=True`` takes a Redis lock per key around the miss
    path so concurrent processes populate once per expiry window.
    """

    name = "redis"

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        *,
        client: Optional[redis.Redis] = None,
        single_flight: bool = False,
        lock_timeout: float = 30.0,
        lock_blocking_timeout: Optional[float] = None,
    ):
        self.redis_url = redis_url
        self.single_flight = single_flight
        self.lock_timeout = lock_timeout
        self.lock_blocking_timeout = lock_blocking_timeout if lock_blocking_timeout is not None else lock_timeout
        self.logger = get_logger("action_cache.stores.redis")
        self._client = client

    @property
    def client(self) -> redis.Redis:
        """Get Redis connection."""
        if self._client is None:
            self._client = redis.Redis.from_url(
                self.redis_url,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30
            )
        return self._client

    def _call(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        try:
            return getattr(self.client, operation)(*args, **kwargs)
        except redis.RedisError as e:
            self.logger.error("Redis operation failed", operation=operation, error=str(e))
            raise StoreUnavailableError(self.name, str(e), details={"operation": operation}) from e

    def fetch(self, key: str, options: CacheOptions, populate: Populate) -> bytes:
        physical = self.physical_key(key, options)

        if not options.force:
            cached = self._call("get", physical)
            if cached is not None:
                return cached

        if not self.single_flight:
            return self._populate(physical, options, populate)

        lock = self._call(
            "lock",
            f"{physical}:lock",
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_blocking_timeout
        )
        try:
            acquired = lock.acquire()
        except redis.RedisError as e:
            raise StoreUnavailableError(self.name, str(e), details={"operation": "lock"}) from e

        if not acquired:
            self.logger.warning("Populate lock not acquired, populating without it", key=physical)
            return self._populate(physical, options, populate)

        try:
            if not options.force:
                cached = self._call("get", physical)
                if cached is not None:
                    return cached
            return self._populate(physical, options, populate)
        finally:
            try:
                lock.release()
            except LockError as e:
                self.logger.warning("Populate lock expired before release", key=physical, error=str(e))
            except redis.RedisError as e:
                # The lock expires on its own after lock_timeout.
                self.logger.warning("Populate lock release failed", key=physical, error=str(e))

    def _populate(self, physical: str, options: CacheOptions, populate: Populate) -> bytes:
        blob = self._run_populate(physical, populate)
        if options.expires_in is not None:
            self._call("set", physical, blob, px=max(1, int(round(options.expires_in * 1000))))
        else:
            self._call("set", physical, blob)
        self.logger.debug("Stored entry", key=physical, expires_in=options.expires_in)
        return blob

    def exists(self, key: str, options: Optional[CacheOptions] = None) -> bool:
        return bool(self._call("exists", self.physical_key(key, options or CacheOptions())))

    def delete(self, key: str, options: Optional[CacheOptions] = None) -> bool:
        return bool(self._call("delete", self.physical_key(key, options or CacheOptions())))

    def ping(self) -> bool:
        """Check Redis health."""
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False
