"""In-memory backend for tests and local debugging.

Records every span it creates and implements both propagation formats:
- FORMAT_TEXT_MAP: ``ot-tracer-traceid``, ``ot-tracer-spanid`` and ``ot-baggage-<key>`` entries
- FORMAT_BINARY: an orjson document ``{trace_id, span_id, baggage}`` in ``carrier.buffer``

Example:
    >>> backend = MockBackend()
    >>> tracer = Tracer(backend)
    >>> with tracer.start_span("work"):
    ...     pass
    >>> backend.finished_spans()[0].operation_name
    'work'
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any

import orjson

from tracekit.backend import FlushCallback
from tracekit.constants import FORMAT_BINARY, FORMAT_TEXT_MAP
from tracekit.fields import SpanFields
from tracekit.logging import get_logger

from .report import MockReport
from .span import MockContextHandle, MockReferenceRecord, MockSpanHandle

_log = get_logger("tracekit.mock")

TRACE_ID_KEY = "ot-tracer-traceid"
SPAN_ID_KEY = "ot-tracer-spanid"
BAGGAGE_PREFIX = "ot-baggage-"


class UnsupportedFormatError(ValueError):
    """Raised by MockBackend for formats outside FORMAT_TEXT_MAP / FORMAT_BINARY."""


@dataclass(eq=False)
class MockBackend:
    """SpanBackend that keeps everything in memory.

    Attributes:
        spans: Every span created, in start order
        flush_count: Number of flush() calls
        flush_error: If set, passed to flush callbacks instead of None
    """

    spans: list[MockSpanHandle] = field(default_factory=list)
    flush_count: int = 0
    flush_error: BaseException | None = None
    _finished: list[MockSpanHandle] = field(default_factory=list, init=False, repr=False)

    # SpanBackend protocol

    def create_span(self, fields: SpanFields) -> MockSpanHandle:
        refs = [MockReferenceRecord(type=r.type, context=r.referenced_context.imp()) for r in fields.parents]
        parent = next((r.context for r in refs if r.context is not None), None)
        ctx = (MockContextHandle(trace_id=parent.trace_id, baggage=dict(parent.baggage))
               if parent is not None else MockContextHandle())
        span = MockSpanHandle(
            operation_name=fields.operation_name,
            backend=self,
            ctx=ctx,
            references=refs,
            **({"tags": fields.tags} if fields.tags is not None else {}),
            **({"start_time": float(fields.start_time)} if fields.start_time is not None else {}),
        )
        self.spans.append(span)
        return span

    def inject(self, context: MockContextHandle | None, format: str, carrier: Any) -> None:  # noqa: A002
        if context is None:
            return
        if format == FORMAT_TEXT_MAP:
            _inject_text_map(context, carrier)
        elif format == FORMAT_BINARY:
            carrier.buffer = orjson.dumps(context.to_dict())
        else:
            raise UnsupportedFormatError(f"MockBackend cannot inject format {format!r}")

    def extract(self, format: str, carrier: Any) -> MockContextHandle | None:  # noqa: A002
        if format == FORMAT_TEXT_MAP:
            return _extract_text_map(carrier)
        if format == FORMAT_BINARY:
            return _extract_binary(getattr(carrier, "buffer", None))
        raise UnsupportedFormatError(f"MockBackend cannot extract format {format!r}")

    def flush(self, done: FlushCallback | None = None) -> None:
        self.flush_count += 1
        if done is not None:
            done(self.flush_error)

    # Inspection

    def _on_finish(self, span: MockSpanHandle) -> None:
        if span not in self._finished:
            self._finished.append(span)

    def finished_spans(self) -> list[MockSpanHandle]:
        """Finished spans in finish order."""
        return list(self._finished)

    def report(self) -> MockReport:
        return MockReport.build(self.spans)

    def clear(self) -> None:
        self.spans.clear()
        self._finished.clear()
        self.flush_count = 0


def _inject_text_map(context: MockContextHandle, carrier: MutableMapping[str, str]) -> None:
    carrier[TRACE_ID_KEY] = context.trace_id
    carrier[SPAN_ID_KEY] = context.span_id
    for key, value in context.baggage.items():
        carrier[f"{BAGGAGE_PREFIX}{key}"] = value


def _extract_text_map(carrier: Mapping[str, Any]) -> MockContextHandle | None:
    # Header carriers may differ in case
    entries = {str(k).lower(): v for k, v in carrier.items()}
    trace_id, span_id = entries.get(TRACE_ID_KEY), entries.get(SPAN_ID_KEY)
    if not trace_id or not span_id:
        return None
    baggage = {k[len(BAGGAGE_PREFIX):]: v for k, v in entries.items() if k.startswith(BAGGAGE_PREFIX)}
    return MockContextHandle(trace_id=trace_id, span_id=span_id, baggage=baggage)


def _extract_binary(buffer: Any) -> MockContextHandle | None:
    if buffer is None or len(buffer) == 0:
        return None
    try:
        data = orjson.loads(bytes(buffer))
    except (orjson.JSONDecodeError, TypeError, ValueError) as e:
        _log.warning("discarding corrupt binary span context", error=str(e), size=len(buffer))
        return None
    if not isinstance(data, dict) or not data.get("trace_id") or not data.get("span_id"):
        _log.warning("discarding incomplete binary span context", keys=sorted(data) if isinstance(data, dict) else None)
        return None
    return MockContextHandle(trace_id=data["trace_id"], span_id=data["span_id"], baggage=dict(data.get("baggage") or {}))
