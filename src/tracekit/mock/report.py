"""Summary of what a MockBackend recorded."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .span import MockSpanHandle


@dataclass(slots=True)
class MockReport:
    """Spans grouped by trace, plus the ones never finished."""

    spans: list[MockSpanHandle] = field(default_factory=list)
    traces: dict[str, list[MockSpanHandle]] = field(default_factory=dict)
    unfinished: list[MockSpanHandle] = field(default_factory=list)

    @classmethod
    def build(cls, spans: list[MockSpanHandle]) -> MockReport:
        traces: dict[str, list[MockSpanHandle]] = {}
        for span in spans:
            traces.setdefault(span.ctx.trace_id, []).append(span)
        return cls(spans=list(spans), traces=traces, unfinished=[s for s in spans if not s.is_finished])

    def first_span_with_tag(self, key: str, value: object) -> MockSpanHandle | None:
        return next((s for s in self.spans if key in s.tags and s.tags[key] == value), None)

    def debug_info(self) -> list[dict[str, object]]:
        return [s.to_dict() for s in self.spans]
