"""
Cache interceptor wrapped around action execution.

For a cached action type the interceptor derives a key from the live context,
asks the store to fetch-or-populate it (populating runs the action and
serializes its context), loads whatever blob the store returns and merges it
into a new context:

    START -> KEY_DERIVED -> STORE_CONSULTED
          -> HIT -> DESERIALIZED
          -> MISS -> ACTION_RUN -> SERIALIZED
          -> MERGED -> DONE

A failing action leaves ACTION_RUN with its own exception: nothing is stored,
loaded or merged, and the exception reaches the caller as raised.
"""

import functools
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

from action_cache_shared.errors import KeyGenerationError, StoreUnavailableError
from action_cache_shared.logging import bound_context, get_logger
from .context import ActionContext, ActionFailure, build_context
from .options import CacheConfig
from .registry import ActionCacheRegistry, action_name
from .runtime import CacheRuntime, StoreFailurePolicy

RunAction = Callable[[], Any]


@dataclass
class _Attempt:
    """What happened inside ``populate`` during one interception."""
    action_ran: bool = False
    blob: Optional[bytes] = None


class CacheInterceptor:
    """Intercepts action execution with cache-or-compute semantics."""

    def __init__(self, runtime: Optional[CacheRuntime] = None, registry: Optional[ActionCacheRegistry] = None):
        self.runtime = runtime if runtime is not None else CacheRuntime()
        self.registry = registry if registry is not None else ActionCacheRegistry()
        self.logger = get_logger("action_cache.interceptor")

    def intercept(self, action_type: Hashable, context: ActionContext, run_action: RunAction) -> ActionContext:
        """
        Run ``run_action`` for ``context`` or serve its result from cache.

        Returns the live context itself when caching is bypassed, otherwise a
        new context merged from the live one and the cached one. Exceptions
        raised by the action propagate unchanged.
        """
        name = action_name(action_type)
        request_id = context.get("request_id")

        with bound_context(action_id=name, request_id=str(request_id) if request_id is not None else None):
            config = self.registry.get(action_type)
            if not self.runtime.enabled or config is None:
                self.logger.debug("cache.bypass", action=name, enabled=self.runtime.enabled)
                self._record_lookup(name, "bypass")
                run_action()
                return context

            try:
                return self._intercept_cached(name, config, context, run_action)
            except Exception as e:
                self._record_error(name, e)
                raise

    def _intercept_cached(
        self,
        name: str,
        config: CacheConfig,
        context: ActionContext,
        run_action: RunAction
    ) -> ActionContext:
        runtime = self.runtime
        key = self._derive_key(name, config, context)
        attempt = _Attempt()

        def populate() -> bytes:
            with self._time_populate(name):
                attempt.action_ran = True
                run_action()
                if context.is_failed():
                    raise ActionFailure(context)
                attempt.blob = runtime.serializer.dump(context)
            self.logger.debug("cache.set", key=key, options=config.options.to_dict())
            return attempt.blob

        try:
            blob = runtime.store.fetch(key, config.options, populate)
        except StoreUnavailableError as e:
            if runtime.store_failure_policy is not StoreFailurePolicy.FAIL_OPEN:
                raise
            self.logger.warning(
                "cache.store_unavailable",
                key=key,
                error=str(e),
                action_ran=attempt.action_ran
            )
            if not attempt.action_ran:
                self._record_lookup(name, "bypass")
                run_action()
                return context
            if attempt.blob is None:
                raise
            blob = attempt.blob

        if attempt.action_ran:
            self._record_lookup(name, "miss")
        else:
            self.logger.debug("cache.hit", key=key)
            self._record_lookup(name, "hit")

        restored = runtime.serializer.load(blob)
        return runtime.merge_strategy.merge(context, restored)

    def _derive_key(self, name: str, config: CacheConfig, context: ActionContext) -> str:
        try:
            key = config.key_generator(context)
        except Exception as e:
            raise KeyGenerationError(
                f"Cache key generator for {name} failed: {e}",
                details={"action": name}
            ) from e

        if not isinstance(key, str) or not key:
            raise KeyGenerationError(
                "Cache key generator must return a non-empty string",
                details={"action": name, "key": repr(key)}
            )
        return key

    def wrap(self, action_type: Hashable, body: Callable[[ActionContext], Any]) -> Callable[..., ActionContext]:
        """
        Wrap an action body into a callable taking the live context.

        The returned callable accepts an ``ActionContext``, a mapping, or
        keyword fields, and returns the resulting context.
        """
        @functools.wraps(body)
        def runner(context: Any = None, **fields: Any) -> ActionContext:
            live = build_context(context, **fields)
            return self.intercept(action_type, live, lambda: body(live))

        return runner

    def around(self, action_type: Optional[Hashable] = None) -> Callable[[Callable[[ActionContext], Any]], Callable[..., ActionContext]]:
        """Decorator form of ``wrap``; the action type defaults to the body itself."""
        def decorator(body: Callable[[ActionContext], Any]) -> Callable[..., ActionContext]:
            return self.wrap(action_type if action_type is not None else body, body)

        return decorator

    def _time_populate(self, name: str):
        metrics = self.runtime.metrics
        if metrics is None:
            return nullcontext()
        return metrics.time_operation("action_cache_populate_duration_seconds", action=name)

    def _record_lookup(self, name: str, result: str) -> None:
        if self.runtime.metrics is not None:
            self.runtime.metrics.record_lookup(name, result)

    def _record_error(self, name: str, error: Exception) -> None:
        if self.runtime.metrics is not None:
            self.runtime.metrics.record_error(name, getattr(error, "code", type(error).__name__))
