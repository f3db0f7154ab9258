"""
Shared utilities for the action cache layer.

This package aggregates the cross-cutting building blocks used by
``action_cache``:

- config: Runtime settings via pydantic-settings
- logging: Structured logging with correlation context
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses

Do not import from ``action_cache`` into this package.
"""
