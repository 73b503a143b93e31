"""Recorded spans and contexts produced by MockBackend."""

from __future__ import annotations

import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tracekit.constants import ReferenceType

    from .backend import MockBackend


def _new_id() -> str:
    return secrets.token_hex(8)


def _now_ms() -> float:
    return time.time() * 1000


@dataclass(slots=True)
class MockContextHandle:
    """Identity of a recorded span. Baggage is shared by reference with the span."""

    trace_id: str = field(default_factory=_new_id)
    span_id: str = field(default_factory=_new_id)
    baggage: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"trace_id": self.trace_id, "span_id": self.span_id, "baggage": dict(self.baggage)}


@dataclass(slots=True)
class MockLog:
    """Single span.log() call."""

    timestamp: float
    fields: dict[str, Any]


@dataclass(slots=True)
class MockReferenceRecord:
    type: ReferenceType
    context: MockContextHandle | None


@dataclass(slots=True, eq=False)
class MockSpanHandle:
    """Span recorded in memory. Implements the SpanHandle protocol.

    Attributes:
        operation_name: Current name (set_operation_name() overwrites it)
        tags: The dict handed to start_span (same object) plus later set_tag() calls
        logs: Every log() call in order
        start_time / finish_time: Unix epoch milliseconds
        references: Parents as recorded at creation
    """

    operation_name: str
    backend: MockBackend = field(repr=False)
    ctx: MockContextHandle = field(default_factory=MockContextHandle)
    tags: dict[str, Any] = field(default_factory=dict)
    logs: list[MockLog] = field(default_factory=list)
    references: list[MockReferenceRecord] = field(default_factory=list)
    start_time: float = field(default_factory=_now_ms)
    finish_time: float | None = None

    @property
    def parent_id(self) -> str | None:
        """Span id of the first populated parent, if any."""
        return next((r.context.span_id for r in self.references if r.context is not None), None)

    @property
    def is_finished(self) -> bool:
        return self.finish_time is not None

    @property
    def duration_ms(self) -> float | None:
        return None if self.finish_time is None else self.finish_time - self.start_time

    # SpanHandle protocol

    def context(self) -> MockContextHandle:
        return self.ctx

    def set_operation_name(self, name: str) -> None:
        self.operation_name = name

    def set_tag(self, key: str, value: Any) -> None:
        self.tags[key] = value

    def log(self, key_values: Mapping[str, Any], timestamp: float | None = None) -> None:
        self.logs.append(MockLog(timestamp=_now_ms() if timestamp is None else timestamp, fields=dict(key_values)))

    def set_baggage_item(self, key: str, value: str) -> None:
        self.ctx.baggage[key] = value

    def get_baggage_item(self, key: str) -> str | None:
        return self.ctx.baggage.get(key)

    def finish(self, finish_time: float | None = None) -> None:
        self.finish_time = _now_ms() if finish_time is None else finish_time
        self.backend._on_finish(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize span for assertions and debugging output."""
        return {
            "operation_name": self.operation_name,
            "trace_id": self.ctx.trace_id,
            "span_id": self.ctx.span_id,
            "parent_id": self.parent_id,
            "start_time": self.start_time,
            "finish_time": self.finish_time,
            "duration_ms": self.duration_ms,
            "tags": dict(self.tags),
            "logs": [{"timestamp": entry.timestamp, **entry.fields} for entry in self.logs],
            "baggage": dict(self.ctx.baggage),
            "references": [{"type": str(r.type), "span_id": r.context.span_id if r.context else None}
                           for r in self.references],
        }
