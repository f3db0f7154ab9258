"""
Serializer contract.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from action_cache_shared.errors import DeserializationError
from ..context import ActionContext


class ContextSerializer(ABC):
    """Round-trips the fields of a context through bytes."""

    name: str = "abstract"

    @abstractmethod
    def dump(self, context: Mapping[str, Any]) -> bytes:
        """Serialize the fields of ``context``. Raises ``SerializationError``."""

    @abstractmethod
    def load(self, blob: bytes) -> ActionContext:
        """Rebuild a context from ``blob``. Raises ``DeserializationError``."""

    def _to_context(self, payload: Any) -> ActionContext:
        if not isinstance(payload, dict):
            raise DeserializationError(
                "Cached payload is not a field mapping",
                details={"serializer": self.name, "payload_type": type(payload).__name__}
            )
        return ActionContext(payload)
