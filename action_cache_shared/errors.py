"""
Shared error handling for the action cache layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class ActionCacheError(Exception):
    """Base exception for the action cache layer."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(ActionCacheError):
    """Invalid cache configuration for an action type or the runtime."""

    def __init__(self, message: str = "Invalid cache configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class KeyGenerationError(ActionCacheError):
    """The cache key generator raised or produced an unusable key."""

    def __init__(self, message: str = "Cache key generation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("KEY_GENERATION_ERROR", message, details)


class SerializationError(ActionCacheError):
    """A context could not be serialized."""

    def __init__(self, message: str = "Context serialization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERIALIZATION_ERROR", message, details)


class DeserializationError(ActionCacheError):
    """A cached blob could not be turned back into a context."""

    def __init__(self, message: str = "Context deserialization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("DESERIALIZATION_ERROR", message, details)


class StoreUnavailableError(ActionCacheError):
    """Cache backend I/O failure."""

    def __init__(self, store: str, message: str = "Cache store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_UNAVAILABLE", f"{store}: {message}", details)
        self.store = store
