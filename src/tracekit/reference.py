"""Causal references between a new span and existing span contexts.

Example:
    >>> parent = tracer.start_span("handle_request")
    >>> child = tracer.start_span("query_db", {"reference": child_of(parent)})
    >>> batch = tracer.start_span("flush_batch", {"references": [follows_from(a), follows_from(b)]})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tracekit.constants import ReferenceType
from tracekit.errors import InvalidArgumentType
from tracekit.span_context import SpanContext

if TYPE_CHECKING:
    from tracekit.span import Span


@dataclass(frozen=True, slots=True, init=False)
class Reference:
    """Link from a span being started to a pre-existing SpanContext.

    Args:
        type: Relationship, REFERENCE_CHILD_OF or REFERENCE_FOLLOWS_FROM
        referenced: The parent, either a Span (its context is taken) or a SpanContext
    """

    type: ReferenceType
    referenced_context: SpanContext

    def __init__(self, type: ReferenceType | str, referenced: Span | SpanContext) -> None:  # noqa: A002
        from tracekit.span import Span

        if isinstance(referenced, Span):
            referenced = referenced.context()
        if not isinstance(referenced, SpanContext):
            raise InvalidArgumentType.create(
                "Reference", "referenced must be a Span or SpanContext",
                found=referenced.__class__.__name__,
            )
        object.__setattr__(self, "type", ReferenceType(type))
        object.__setattr__(self, "referenced_context", referenced)


def child_of(referenced: Span | SpanContext) -> Reference:
    """Reference for a child whose parent waits on its completion."""
    return Reference(ReferenceType.CHILD_OF, referenced)


def follows_from(referenced: Span | SpanContext) -> Reference:
    """Reference for a span caused by, but not awaited by, the referenced one."""
    return Reference(ReferenceType.FOLLOWS_FROM, referenced)
