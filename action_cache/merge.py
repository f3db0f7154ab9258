"""
Strategies reconciling a live context with a context restored from cache.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Type

from action_cache_shared.errors import ConfigurationError
from .context import ActionContext


class MergeStrategy(ABC):
    """Combine the live and cached contexts into a new context."""

    name: str = "abstract"

    @abstractmethod
    def merge(self, live: ActionContext, cached: ActionContext) -> ActionContext:
        """Return a new context; neither argument is modified."""


class ParanoidMergeStrategy(MergeStrategy):
    """
    Cached fields fill in, live fields win.

    Every field of ``cached`` is kept unless ``live`` holds an explicitly set
    (non-``None``) value for it. Fields only present in ``live`` are kept.
    """

    name = "paranoid"

    def merge(self, live: ActionContext, cached: ActionContext) -> ActionContext:
        merged = ActionContext(cached)
        for field, value in live.items():
            if value is not None or field not in merged:
                merged[field] = value
        return merged


class OverwriteMergeStrategy(MergeStrategy):
    """The cached context replaces the live one, except for ``preserve`` fields."""

    name = "overwrite"

    def __init__(self, preserve: Iterable[str] = ()):
        self.preserve = tuple(preserve)

    def merge(self, live: ActionContext, cached: ActionContext) -> ActionContext:
        merged = ActionContext(cached)
        for field in self.preserve:
            if field in live:
                merged[field] = live[field]
        return merged


MERGE_STRATEGIES: Dict[str, Type[MergeStrategy]] = {
    "paranoid": ParanoidMergeStrategy,
    "overwrite": OverwriteMergeStrategy,
}


def get_merge_strategy(name: str) -> MergeStrategy:
    """Instantiate a merge strategy by its configured name."""
    try:
        return MERGE_STRATEGIES[name.lower()]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown merge strategy: {name}",
            details={"available": sorted(MERGE_STRATEGIES)}
        ) from None
