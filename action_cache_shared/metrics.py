"""
Shared metrics configuration for the action cache layer.
"""

from prometheus_client import Counter, Histogram, CollectorRegistry, start_http_server
from typing import Dict, Any, Optional
import time
import threading
from contextlib import contextmanager


class CacheMetricsCollector:
    """Prometheus metrics for cache interception."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up cache metrics."""
        with self._lock:
            self._metrics["action_cache_lookups_total"] = Counter(
                "action_cache_lookups_total",
                "Total intercepted action executions by outcome",
                ["action", "result"],
                registry=self.registry
            )

            self._metrics["action_cache_errors_total"] = Counter(
                "action_cache_errors_total",
                "Total errors raised through the interceptor",
                ["action", "error_type"],
                registry=self.registry
            )

            self._metrics["action_cache_populate_duration_seconds"] = Histogram(
                "action_cache_populate_duration_seconds",
                "Time spent running and serializing an action on a cache miss",
                ["action"],
                registry=self.registry
            )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def start_metrics_server(self, port: int = 9090):
        """Start the Prometheus metrics server."""
        start_http_server(port, registry=self.registry)

    def record_lookup(self, action: str, result: str):
        """Record a hit, miss or bypass."""
        self.increment_counter("action_cache_lookups_total", action=action, result=result)

    def record_error(self, action: str, error_type: str):
        """Record error metrics."""
        self.increment_counter("action_cache_errors_total", action=action, error_type=error_type)

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            if operation_name in self._metrics:
                self._metrics[operation_name].labels(**labels).observe(duration)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).inc()

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).observe(value)

    def sample(self, metric_name: str, **labels) -> Optional[float]:
        """Read the current value of a counter sample from the registry."""
        return self.registry.get_sample_value(metric_name, labels)


def get_metrics_collector(registry: Optional[CollectorRegistry] = None) -> CacheMetricsCollector:
    """Get a metrics collector."""
    return CacheMetricsCollector(registry)
