"""
JSON serializer for contexts whose fields are plain JSON values.
"""

import json
from typing import Any, Mapping

from action_cache_shared.errors import SerializationError, DeserializationError
from ..context import ActionContext
from .base import ContextSerializer

_SCALARS = (type(None), bool, int, float, str)


class JsonSerializer(ContextSerializer):
    """
    Serialize context fields as UTF-8 JSON with sorted keys.

    Only values that come back unchanged are accepted: ``None``, ``bool``,
    ``int``, ``float``, ``str``, lists of those and dicts keyed by ``str``.
    Tuples, sets, non-string keys and subclasses such as enums raise
    ``SerializationError`` instead of loading back as something else.
    """

    name = "json"

    def dump(self, context: Mapping[str, Any]) -> bytes:
        payload = dict(context)
        self._check_representable(payload, "$")
        try:
            text = json.dumps(payload, sort_keys=True, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Context is not JSON representable: {e}",
                details={"serializer": self.name}
            ) from e
        return text.encode("utf-8")

    def load(self, blob: bytes) -> ActionContext:
        try:
            payload = json.loads(blob)
        except (TypeError, ValueError) as e:
            raise DeserializationError(
                f"Malformed JSON payload: {e}",
                details={"serializer": self.name}
            ) from e
        return self._to_context(payload)

    def _check_representable(self, value: Any, path: str) -> None:
        kind = type(value)
        if kind in _SCALARS:
            return
        if kind is list:
            for index, item in enumerate(value):
                self._check_representable(item, f"{path}[{index}]")
            return
        if kind is dict:
            for key, item in value.items():
                if type(key) is not str:
                    raise SerializationError(
                        f"Key {key!r} at {path} would not load back as the same key",
                        details={"serializer": self.name, "path": path}
                    )
                self._check_representable(item, f"{path}.{key}")
            return
        raise SerializationError(
            f"Value of type {kind.__name__} at {path} would not load back unchanged",
            details={"serializer": self.name, "path": path, "type": kind.__name__}
        )
