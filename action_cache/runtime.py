"""
Process-wide cache runtime: the chosen store, serializer, merge strategy and
the global enable switch, held in one explicit object.

A runtime is built at bootstrap and treated as read-only afterwards. Swapping
its parts while actions are executing is the caller's responsibility; nothing
here guards against it.
"""

from dataclasses import dataclass, field, replace as dataclass_replace
from enum import Enum
from typing import Optional

from action_cache_shared.config import ActionCacheSettings, get_settings
from action_cache_shared.logging import configure_logging, get_logger
from action_cache_shared.metrics import CacheMetricsCollector
from .merge import MergeStrategy, ParanoidMergeStrategy, get_merge_strategy
from .serializers import ContextSerializer, PickleSerializer, get_serializer
from .stores import CacheStore, MemoryCacheStore, RedisCacheStore, WorthlessCacheStore

logger = get_logger("action_cache.runtime")


class StoreFailurePolicy(str, Enum):
    """What to do when the store raises ``StoreUnavailableError``."""
    FAIL_CLOSED = "fail_closed"  # propagate
    FAIL_OPEN = "fail_open"      # serve the computed context uncached


@dataclass(frozen=True)
class CacheRuntime:
    enabled: bool = True
    store: CacheStore = field(default_factory=WorthlessCacheStore)
    serializer: ContextSerializer = field(default_factory=PickleSerializer)
    merge_strategy: MergeStrategy = field(default_factory=ParanoidMergeStrategy)
    store_failure_policy: StoreFailurePolicy = StoreFailurePolicy.FAIL_CLOSED
    metrics: Optional[CacheMetricsCollector] = None

    @classmethod
    def from_settings(cls, settings: ActionCacheSettings) -> "CacheRuntime":
        """Build a runtime from settings."""
        if settings.store == "redis":
            store: CacheStore = RedisCacheStore(
                settings.redis_url,
                single_flight=settings.single_flight,
                lock_timeout=settings.lock_timeout
            )
        elif settings.store == "memory":
            store = MemoryCacheStore(single_flight=settings.single_flight)
        else:
            store = WorthlessCacheStore()

        return cls(
            enabled=settings.enabled,
            store=store,
            serializer=get_serializer(settings.serializer),
            merge_strategy=get_merge_strategy(settings.merge_strategy),
            store_failure_policy=StoreFailurePolicy(settings.store_failure_policy),
            metrics=CacheMetricsCollector() if settings.metrics_enabled else None
        )

    def replace(self, **changes) -> "CacheRuntime":
        """Copy of this runtime with some parts swapped."""
        return dataclass_replace(self, **changes)


def bootstrap(settings: Optional[ActionCacheSettings] = None) -> CacheRuntime:
    """
    Process start-up: configure logging at ``settings.log_level``, build the
    runtime and, when metrics are enabled and ``metrics_port`` is set, expose
    them over HTTP on that port.
    """
    settings = settings if settings is not None else get_settings()
    configure_logging("action_cache", settings.log_level)

    runtime = CacheRuntime.from_settings(settings)
    if runtime.metrics is not None and settings.metrics_port is not None:
        runtime.metrics.start_metrics_server(settings.metrics_port)

    logger.info(
        "Action cache runtime ready",
        enabled=runtime.enabled,
        store=runtime.store.name,
        serializer=runtime.serializer.name,
        merge_strategy=runtime.merge_strategy.name,
        metrics_port=settings.metrics_port if runtime.metrics is not None else None
    )
    return runtime
