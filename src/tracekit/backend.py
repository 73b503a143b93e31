"""Capability interfaces a tracing backend implements to plug in behind the facade.

The facade never introspects backend objects. It hands SpanFields to
``create_span`` and passes the returned handles around opaquely.

NoopBackend is the explicit "absent" variant: a Tracer built without a
backend dispatches to it, so every operation is a defined no-op.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tracekit.fields import SpanFields

FlushCallback = Callable[[BaseException | None], None]


@runtime_checkable
class SpanHandle(Protocol):
    """Backend-side span. Facade Span methods delegate here one-to-one."""

    def context(self) -> Any: ...
    def set_operation_name(self, name: str) -> None: ...
    def set_tag(self, key: str, value: Any) -> None: ...
    def log(self, key_values: Mapping[str, Any], timestamp: float | None = None) -> None: ...
    def set_baggage_item(self, key: str, value: str) -> None: ...
    def get_baggage_item(self, key: str) -> str | None: ...
    def finish(self, finish_time: float | None = None) -> None: ...


@runtime_checkable
class SpanBackend(Protocol):
    """Tracing implementation installed into a Tracer.

    Contract:
        create_span: Receives the canonical SpanFields. ``fields.tags`` is the
            caller's own dict (not a copy) and now belongs to the backend.
        inject: Receives the backend's own context handle (or None for a no-op
            context) and mutates ``carrier``. Unknown formats are the backend's call.
        extract: Returns a context handle, or None when the carrier holds no
            trace data. Must not raise merely because data is absent.
        flush: Calls ``done(error)`` exactly once when given, error None on success.
    """

    def create_span(self, fields: SpanFields) -> SpanHandle | None: ...
    def inject(self, context: Any, format: str, carrier: Any) -> None: ...  # noqa: A002
    def extract(self, format: str, carrier: Any) -> Any: ...  # noqa: A002
    def flush(self, done: FlushCallback | None = None) -> None: ...


class NoopSpanHandle:
    """Span handle that records nothing."""

    __slots__ = ()

    def context(self) -> None:
        return None

    def set_operation_name(self, name: str) -> None:
        pass

    def set_tag(self, key: str, value: Any) -> None:
        pass

    def log(self, key_values: Mapping[str, Any], timestamp: float | None = None) -> None:
        pass

    def set_baggage_item(self, key: str, value: str) -> None:
        pass

    def get_baggage_item(self, key: str) -> None:
        return None

    def finish(self, finish_time: float | None = None) -> None:
        pass


class NoopBackend:
    """Backend used when none is installed: creates nothing, propagates nothing."""

    __slots__ = ()

    def create_span(self, fields: SpanFields) -> None:
        return None

    def inject(self, context: Any, format: str, carrier: Any) -> None:  # noqa: A002
        pass

    def extract(self, format: str, carrier: Any) -> None:  # noqa: A002
        return None

    def flush(self, done: FlushCallback | None = None) -> None:
        # Nothing is buffered, so success is immediate.
        if done is not None:
            done(None)


NOOP_SPAN_HANDLE = NoopSpanHandle()
NOOP_BACKEND = NoopBackend()
