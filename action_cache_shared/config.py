"""
Shared configuration management for the action cache layer.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ActionCacheSettings(BaseSettings):
    """Process-wide action cache settings, read from ``ACTION_CACHE_*``."""

    model_config = SettingsConfigDict(
        env_prefix="ACTION_CACHE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Global switch
    enabled: bool = Field(default=True)

    # Strategy selection
    store: Literal["worthless", "memory", "redis"] = Field(default="worthless")
    serializer: Literal["pickle", "marshal", "json"] = Field(default="pickle")
    merge_strategy: Literal["paranoid", "overwrite"] = Field(default="paranoid")
    store_failure_policy: Literal["fail_closed", "fail_open"] = Field(default="fail_closed")

    # Backends
    redis_url: str = Field(default="redis://localhost:6379/0")
    single_flight: bool = Field(default=False)
    lock_timeout: float = Field(default=30.0, gt=0)

    # Observability
    log_level: str = Field(default="info")
    metrics_enabled: bool = Field(default=False)
    metrics_port: Optional[int] = Field(default=None, gt=0, lt=65536)


def get_settings(**overrides) -> ActionCacheSettings:
    """Get settings, with explicit overrides taking precedence over the environment."""
    return ActionCacheSettings(**overrides)
