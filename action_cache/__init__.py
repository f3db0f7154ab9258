"""
Action cache: cache-or-compute interception for single-unit-of-work actions.

An action type registers a key generator and store options. The interceptor
wraps the action body, derives a key from the live context and either serves
the stored result, merged into the live context, or runs the action and
stores its serialized context.
"""

from .context import ActionContext, ActionFailure, build_context
from .interceptor import CacheInterceptor
from .merge import MergeStrategy, OverwriteMergeStrategy, ParanoidMergeStrategy, get_merge_strategy
from .options import CacheConfig, CacheConfigBuilder, CacheOptions
from .registry import ActionCacheRegistry
from .runtime import CacheRuntime, StoreFailurePolicy, bootstrap
from .serializers import ContextSerializer, JsonSerializer, PickleSerializer, get_serializer
from .stores import CacheStore, MemoryCacheStore, RedisCacheStore, WorthlessCacheStore, get_store

__all__ = [
    "ActionCacheRegistry",
    "ActionContext",
    "ActionFailure",
    "CacheConfig",
    "CacheConfigBuilder",
    "CacheInterceptor",
    "CacheOptions",
    "CacheRuntime",
    "CacheStore",
    "ContextSerializer",
    "JsonSerializer",
    "MemoryCacheStore",
    "MergeStrategy",
    "OverwriteMergeStrategy",
    "ParanoidMergeStrategy",
    "PickleSerializer",
    "RedisCacheStore",
    "StoreFailurePolicy",
    "WorthlessCacheStore",
    "bootstrap",
    "build_context",
    "get_merge_strategy",
    "get_serializer",
    "get_store",
]
