"""
Action context: the mutable result record of one action execution.
"""

from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, Mapping, Optional


class ActionFailure(Exception):
    """Raised when an action marks its context as failed."""

    def __init__(self, context: "ActionContext", message: Optional[str] = None):
        self.context = context
        super().__init__(message or str(context.get("error") or "Action failed"))


class ActionContext(MutableMapping):
    """
    Key-addressable record owned by one in-flight action execution.

    Fields are reachable both as items (``ctx["name"]``) and attributes
    (``ctx.name``). Reading an attribute that was never set yields ``None``.
    Any field name works through item access. Names taken by methods of this
    class (``get``, ``fail``, ``keys`` ...) cannot be assigned as attributes.

    Whether the context failed is bookkeeping, not a field: it is read with
    ``is_failed()`` and never serialized.
    """

    def __init__(self, fields: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        object.__setattr__(self, "_fields", {})
        object.__setattr__(self, "_failed", False)
        if fields:
            self._fields.update(fields)
        self._fields.update(kwargs)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._fields[key] = value

    def __delitem__(self, key: str) -> None:
        del self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._fields.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        elif hasattr(type(self), name):
            raise AttributeError(f"{name!r} is an ActionContext method; set it with ctx[{name!r}] instead")
        else:
            self._fields[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        state = " failed" if self._failed else ""
        return f"<ActionContext{state} {self._fields!r}>"

    def is_failed(self) -> bool:
        return self._failed

    def is_success(self) -> bool:
        return not self._failed

    def fail(self, error: Any = None, **fields: Any) -> None:
        """
        Record ``fields``, mark the context failed and raise ``ActionFailure``.

        A given ``error`` is written to the ``error`` field like any other
        field, so it stays readable as ``ctx.error`` after the failure.
        """
        if error is not None:
            fields["error"] = error
        self._fields.update(fields)
        object.__setattr__(self, "_failed", True)
        raise ActionFailure(self)

    def to_dict(self) -> Dict[str, Any]:
        """Shallow copy of the fields."""
        return dict(self._fields)

    def copy(self) -> "ActionContext":
        return type(self)(self._fields)


def build_context(context: Any = None, **fields: Any) -> ActionContext:
    """Coerce ``None``, a mapping or an existing context into an ``ActionContext``."""
    if isinstance(context, ActionContext):
        context.update(fields)
        return context
    return ActionContext(context, **fields)
