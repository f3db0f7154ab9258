"""
Pickle-backed serializer, the default binary codec.
"""

import pickle
from typing import Any, Mapping

from action_cache_shared.errors import SerializationError, DeserializationError
from ..context import ActionContext
from .base import ContextSerializer


class PickleSerializer(ContextSerializer):
    """Serialize context fields with ``pickle``.

    Only load blobs written by a trusted store: unpickling runs arbitrary code.
    """

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def dump(self, context: Mapping[str, Any]) -> bytes:
        try:
            return pickle.dumps(dict(context), protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise SerializationError(
                f"Context is not picklable: {e}",
                details={"serializer": self.name}
            ) from e

    def load(self, blob: bytes) -> ActionContext:
        if not isinstance(blob, (bytes, bytearray)):
            raise DeserializationError(
                "Cached blob is not bytes",
                details={"serializer": self.name, "blob_type": type(blob).__name__}
            )
        try:
            payload = pickle.loads(blob)
        except Exception as e:
            raise DeserializationError(
                f"Malformed pickle payload: {e}",
                details={"serializer": self.name, "size": len(blob)}
            ) from e
        return self._to_context(payload)
