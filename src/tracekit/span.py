"""Span: one timed unit of work.

Spans are created by Tracer.start_span() and finished explicitly by the caller,
or automatically when used as a context manager:

    >>> with tracer.start_span("fetch_user") as span:
    ...     span.set_tag("user.id", 42)
    ...     user = repo.get(42)

Every method passes through to the backend's span handle. A span created with
no backend installed is a complete no-op.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from tracekit.backend import NOOP_SPAN_HANDLE, SpanHandle
from tracekit.span_context import SpanContext

if TYPE_CHECKING:
    from types import TracebackType


class Span:
    """Facade over a backend span handle.

    Mutators return self for chaining. Behaviour after finish() is defined by
    the backend; the facade does not guard against it.
    """

    __slots__ = ("_imp", "_handle")

    def __init__(self, imp: SpanHandle | None = None) -> None:
        self._imp = imp
        self._handle: SpanHandle = imp if imp is not None else NOOP_SPAN_HANDLE

    def context(self) -> SpanContext:
        """SpanContext for this span, derived from the backend on every call."""
        return SpanContext(self._handle.context())

    def set_operation_name(self, name: str) -> Span:
        self._handle.set_operation_name(name)
        return self

    def set_tag(self, key: str, value: Any) -> Span:
        self._handle.set_tag(key, value)
        return self

    def add_tags(self, tags: Mapping[str, Any]) -> Span:
        """Set several tags at once."""
        for key, value in tags.items():
            self._handle.set_tag(key, value)
        return self

    def log(self, key_values: Mapping[str, Any], timestamp: float | None = None) -> Span:
        """Record a structured event.

        Args:
            key_values: Event payload, e.g. {"event": "cache_miss", "key": k}
            timestamp: Unix epoch milliseconds (fractional allowed); backend clock if None
        """
        self._handle.log(key_values, timestamp)
        return self

    def set_baggage_item(self, key: str, value: str) -> Span:
        """Attach a key/value that propagates to all descendants of this span."""
        self._handle.set_baggage_item(key, value)
        return self

    def get_baggage_item(self, key: str) -> str | None:
        return self._handle.get_baggage_item(key)

    def finish(self, finish_time: float | None = None) -> None:
        """End the span. ``finish_time`` is Unix epoch milliseconds."""
        self._handle.finish(finish_time)

    def imp(self) -> SpanHandle | None:
        """Backend span handle, or None for a no-op span."""
        return self._imp

    def __enter__(self) -> Span:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if exc_val is not None:
            self.set_tag("error", True)
            self.log({
                "event": "error",
                "error.kind": type(exc_val).__name__,
                "error.object": exc_val,
                "message": str(exc_val),
            })
        self.finish()

    def __repr__(self) -> str:
        return f"Span({self._imp!r})" if self._imp is not None else "Span(<noop>)"
