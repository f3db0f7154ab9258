"""
Shared logging configuration for the action cache layer.
"""

import sys
import structlog
import logging
from typing import Any, Dict, Iterator, Optional
from contextlib import contextmanager
from contextvars import ContextVar

# Correlation IDs of the action being intercepted
action_id_var: ContextVar[Optional[str]] = ContextVar('action_id', default=None)
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)


def configure_logging(service_name: str = "action_cache", log_level: str = "info") -> None:
    """Configure structlog to render JSON lines through stdlib logging."""
    level = getattr(logging, log_level.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            add_component,
            add_correlation_context,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger(service_name).setLevel(level)


def add_component(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Split ``action_cache.stores.redis`` into service and component fields."""
    logger_name = event_dict.get("logger", "")
    service, _, component = logger_name.partition(".")
    if component:
        event_dict["service"] = service
        event_dict["component"] = component
    return event_dict


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Attach the action and request being intercepted."""
    action_id = action_id_var.get()
    if action_id:
        event_dict["action_id"] = action_id

    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id

    return event_dict


def set_action_context(action_id: Optional[str] = None, request_id: Optional[str] = None):
    """Set the action being intercepted and the request it serves."""
    if action_id:
        action_id_var.set(action_id)
    if request_id:
        request_id_var.set(request_id)


def clear_context():
    """Clear all context variables."""
    action_id_var.set(None)
    request_id_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


@contextmanager
def bound_context(action_id: Optional[str] = None, request_id: Optional[str] = None) -> Iterator[None]:
    """Bind correlation IDs for the duration of a block, restoring the previous values after."""
    tokens = []
    if action_id:
        tokens.append((action_id_var, action_id_var.set(action_id)))
    if request_id:
        tokens.append((request_id_var, request_id_var.set(request_id)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
