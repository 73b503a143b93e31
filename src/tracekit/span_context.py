"""SpanContext: the portable identity of a span."""

from __future__ import annotations

from typing import Any


class SpanContext:
    """Opaque, propagatable identity of a span.

    Wraps exactly one backend context handle, or none. A SpanContext without a
    handle is a valid no-op context: it can be injected (nothing happens) and
    used as a parent reference (the parent is vacuous).

    Created by Span.context() and Tracer.extract(); callers should not build
    populated contexts themselves. Immutable after construction.
    """

    __slots__ = ("_imp",)

    def __init__(self, imp: Any = None) -> None:
        object.__setattr__(self, "_imp", imp)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self) -> tuple[type[SpanContext], tuple[Any]]:
        # Rebuild through __init__; slot-state restore would hit __setattr__
        return (type(self), (self._imp,))

    def imp(self) -> Any:
        """Backend context handle, or None for a no-op context."""
        return self._imp

    @property
    def is_noop(self) -> bool:
        return self._imp is None

    def __repr__(self) -> str:
        return f"SpanContext({self._imp!r})" if self._imp is not None else "SpanContext(<noop>)"
