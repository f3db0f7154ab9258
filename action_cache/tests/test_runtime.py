"""
Unit tests for settings and the cache runtime.
"""

import os

import pytest
from unittest.mock import patch
from pydantic import ValidationError

from action_cache.merge import OverwriteMergeStrategy, ParanoidMergeStrategy
from action_cache.runtime import CacheRuntime, StoreFailurePolicy, bootstrap
from action_cache.serializers import JsonSerializer, PickleSerializer
from action_cache.stores import MemoryCacheStore, RedisCacheStore, WorthlessCacheStore
from action_cache_shared.config import ActionCacheSettings, get_settings
from action_cache_shared.metrics import CacheMetricsCollector


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep ACTION_CACHE_* variables from the host out of these tests."""
    for name in list(os.environ):
        if name.startswith("ACTION_CACHE_"):
            monkeypatch.delenv(name)


class TestActionCacheSettings:
    """Test cases for ActionCacheSettings."""

    def test_defaults(self):
        """Test default settings select the null pipeline."""
        settings = get_settings()

        assert settings.enabled is True
        assert settings.store == "worthless"
        assert settings.serializer == "pickle"
        assert settings.merge_strategy == "paranoid"
        assert settings.store_failure_policy == "fail_closed"
        assert settings.metrics_enabled is False
        assert settings.metrics_port is None
        assert settings.log_level == "info"

    def test_environment_overrides(self, monkeypatch):
        """Test ACTION_CACHE_* variables configure the runtime."""
        monkeypatch.setenv("ACTION_CACHE_ENABLED", "false")
        monkeypatch.setenv("ACTION_CACHE_STORE", "redis")
        monkeypatch.setenv("ACTION_CACHE_REDIS_URL", "redis://cache:6379/2")

        settings = ActionCacheSettings()

        assert settings.enabled is False
        assert settings.store == "redis"
        assert settings.redis_url == "redis://cache:6379/2"

    def test_explicit_overrides_win(self, monkeypatch):
        """Test keyword overrides beat the environment."""
        monkeypatch.setenv("ACTION_CACHE_STORE", "redis")

        assert get_settings(store="memory").store == "memory"

    def test_invalid_choice_rejected(self):
        """Test unknown strategy names fail validation."""
        with pytest.raises(ValidationError):
            get_settings(store="memcached")

    def test_lock_timeout_must_be_positive(self):
        """Test lock timeouts are validated."""
        with pytest.raises(ValidationError):
            get_settings(lock_timeout=0)


class TestCacheRuntime:
    """Test cases for CacheRuntime."""

    def test_defaults(self):
        """Test the default runtime is the null, paranoid, fail-closed pipeline."""
        runtime = CacheRuntime()

        assert runtime.enabled is True
        assert isinstance(runtime.store, WorthlessCacheStore)
        assert isinstance(runtime.serializer, PickleSerializer)
        assert isinstance(runtime.merge_strategy, ParanoidMergeStrategy)
        assert runtime.store_failure_policy is StoreFailurePolicy.FAIL_CLOSED
        assert runtime.metrics is None

    def test_from_settings_memory(self):
        """Test building a memory-backed runtime."""
        runtime = CacheRuntime.from_settings(get_settings(
            store="memory",
            serializer="json",
            merge_strategy="overwrite",
            store_failure_policy="fail_open",
            single_flight=True,
            metrics_enabled=True,
        ))

        assert isinstance(runtime.store, MemoryCacheStore)
        assert runtime.store.single_flight is True
        assert isinstance(runtime.serializer, JsonSerializer)
        assert isinstance(runtime.merge_strategy, OverwriteMergeStrategy)
        assert runtime.store_failure_policy is StoreFailurePolicy.FAIL_OPEN
        assert isinstance(runtime.metrics, CacheMetricsCollector)

    def test_from_settings_redis(self):
        """Test building a redis-backed runtime does not connect eagerly."""
        runtime = CacheRuntime.from_settings(get_settings(store="redis", redis_url="redis://cache:6379/3", lock_timeout=5))

        assert isinstance(runtime.store, RedisCacheStore)
        assert runtime.store.redis_url == "redis://cache:6379/3"
        assert runtime.store.lock_timeout == 5

    def test_from_settings_disabled(self):
        """Test the enable switch is carried over."""
        assert CacheRuntime.from_settings(get_settings(enabled=False)).enabled is False

    def test_replace_returns_copy(self):
        """Test swapping parts leaves the original runtime untouched."""
        runtime = CacheRuntime()
        store = MemoryCacheStore()

        swapped = runtime.replace(store=store, enabled=False)

        assert swapped.store is store
        assert swapped.enabled is False
        assert isinstance(runtime.store, WorthlessCacheStore)
        assert runtime.enabled is True

    def test_runtime_is_frozen(self):
        """Test runtimes are read-only once built."""
        runtime = CacheRuntime()

        with pytest.raises(AttributeError):
            runtime.enabled = False


class TestBootstrap:
    """Test cases for process start-up."""

    def test_configures_logging_at_settings_level(self):
        """Test log_level from settings reaches the logging setup."""
        with patch("action_cache.runtime.configure_logging") as configure:
            runtime = bootstrap(get_settings(store="memory", log_level="debug"))

        configure.assert_called_once_with("action_cache", "debug")
        assert isinstance(runtime.store, MemoryCacheStore)

    def test_reads_environment_when_no_settings_given(self, monkeypatch):
        """Test bootstrap falls back to ACTION_CACHE_* variables."""
        monkeypatch.setenv("ACTION_CACHE_LOG_LEVEL", "warning")
        monkeypatch.setenv("ACTION_CACHE_ENABLED", "false")

        with patch("action_cache.runtime.configure_logging") as configure:
            runtime = bootstrap()

        configure.assert_called_once_with("action_cache", "warning")
        assert runtime.enabled is False

    def test_starts_metrics_server_on_port(self):
        """Test metrics are exposed on metrics_port when enabled."""
        with patch("action_cache.runtime.configure_logging"), \
                patch("action_cache_shared.metrics.start_http_server") as start_server:
            runtime = bootstrap(get_settings(metrics_enabled=True, metrics_port=9105))

        start_server.assert_called_once_with(9105, registry=runtime.metrics.registry)

    @pytest.mark.parametrize("overrides", [
        {"metrics_enabled": True},
        {"metrics_enabled": False, "metrics_port": 9105},
    ])
    def test_no_metrics_server_without_port_or_metrics(self, overrides):
        """Test the HTTP endpoint needs both metrics and a port."""
        with patch("action_cache.runtime.configure_logging"), \
                patch("action_cache_shared.metrics.start_http_server") as start_server:
            bootstrap(get_settings(**overrides))

        start_server.assert_not_called()

    def test_metrics_port_validated(self):
        """Test out-of-range ports fail validation."""
        with pytest.raises(ValidationError):
            get_settings(metrics_port=70000)
