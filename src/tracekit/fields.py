"""Canonical start_span request and the normalization of its call shapes.

Tracer.start_span accepts three shapes:

    start_span("operation")
    start_span("operation", {"tags": {...}, "reference": child_of(parent)})
    start_span({"operation_name": "operation", "start_time": 1700000000000.5})

normalize_start_span_args() turns any of them into a single SpanFields before
the backend sees the request. With ``strict=True`` every conformance check runs
first; otherwise malformed input is forwarded as-is.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from tracekit.errors import (
    ConflictingReferences,
    ConformanceError,
    EmptyOperationName,
    InvalidArgumentCount,
    InvalidArgumentType,
    MissingOperationName,
)
from tracekit.logging import get_logger
from tracekit.reference import Reference

_log = get_logger("tracekit.fields")

FIELD_NAMES: frozenset[str] = frozenset({"operation_name", "reference", "references", "tags", "start_time"})


@dataclass(slots=True)
class SpanFields:
    """Everything a backend needs to create a span.

    Attributes:
        operation_name: Name of the unit of work
        reference: Single causal parent (exclusive with ``references``)
        references: Several causal parents (exclusive with ``reference``)
        tags: Initial tags. Ownership passes to the created span: this is the
            caller's own dict, not a copy, and must not be mutated after start_span()
        start_time: Unix epoch milliseconds, fractional for sub-ms precision
    """

    operation_name: str
    reference: Reference | None = None
    references: list[Reference] | None = None
    tags: dict[str, Any] | None = None
    start_time: float | None = None

    @property
    def parents(self) -> tuple[Reference, ...]:
        """All references, whichever field supplied them."""
        if self.reference is not None:
            return (self.reference,)
        return tuple(self.references or ())

    @classmethod
    def from_mapping(cls, fields: Mapping[str, Any], operation_name: Any = None) -> SpanFields:
        """Build from a mapping, keeping values by identity. Unknown keys are ignored."""
        values = {k: fields[k] for k in FIELD_NAMES if k in fields}
        if operation_name is not None:
            values["operation_name"] = operation_name
        values.setdefault("operation_name", None)
        return cls(**values)


def reject(exc: ConformanceError) -> ConformanceError:
    """Log a failed conformance check; returns the exception for ``raise``."""
    _log.debug("conformance check failed", code=exc.error.code, operation=exc.error.operation,
               message=exc.error.message)
    return exc


def normalize_start_span_args(args: tuple[Any, ...], *, strict: bool = True) -> SpanFields:
    """Collapse any accepted start_span call shape into one SpanFields."""
    if strict:
        _check_shape(args)

    first = args[0] if args else None
    second = args[1] if len(args) > 1 else None

    if isinstance(first, SpanFields):
        fields = first
    elif isinstance(first, Mapping):
        fields = SpanFields.from_mapping(first)
    elif isinstance(second, SpanFields):
        fields = dataclasses.replace(second, operation_name=first)
    else:
        fields = SpanFields.from_mapping(second if isinstance(second, Mapping) else {}, operation_name=first)

    if strict:
        _check_fields(fields)
    return fields


def _check_shape(args: tuple[Any, ...]) -> None:
    if len(args) not in (1, 2):
        raise reject(InvalidArgumentCount.create("start_span", "Invalid number of arguments.",
                                                 expected="1 or 2", got=len(args)))
    first = args[0]
    match first:
        case str():
            if not first:
                raise reject(EmptyOperationName.create("start_span", "operation name cannot be length zero"))
            if len(args) == 2:
                _check_fields_arg(args[1])
        case SpanFields() | Mapping():
            if len(args) != 1:
                raise reject(InvalidArgumentCount.create(
                    "start_span", "Unexpected number of arguments: fields given as the first argument",
                    got=len(args)))
            if isinstance(first, Mapping):
                _check_keys(first)
                name = first.get("operation_name")
            else:
                name = first.operation_name
            if not name:
                raise reject(MissingOperationName.create("start_span", "operation_name is a required parameter"))
            if not isinstance(name, str):
                raise reject(InvalidArgumentType.create("start_span", "operation_name must be a string",
                                                        found=type(name).__name__))
        case None:
            raise reject(InvalidArgumentType.create("start_span", "fields should not be None"))
        case _:
            raise reject(InvalidArgumentType.create("start_span", "argument expected to be a string or mapping",
                                                    found=type(first).__name__))


def _check_fields_arg(fields: Any) -> None:
    if fields is None or isinstance(fields, SpanFields):
        return
    if not isinstance(fields, Mapping):
        raise reject(InvalidArgumentType.create("start_span", "fields expected to be a mapping",
                                                found=type(fields).__name__))
    _check_keys(fields)


def _check_keys(fields: Mapping[str, Any]) -> None:
    if unknown := sorted(str(k) for k in fields if k not in FIELD_NAMES):
        raise reject(InvalidArgumentType.create("start_span", "unknown span fields", unknown=unknown,
                                                allowed=sorted(FIELD_NAMES)))


def _check_fields(fields: SpanFields) -> None:
    if fields.reference is not None and fields.references is not None:
        raise reject(ConflictingReferences.create("start_span",
                                                  "At most one of `reference` and `references` may be specified"))
    if fields.reference is not None and not isinstance(fields.reference, Reference):
        raise reject(InvalidArgumentType.create("start_span", "reference must be a Reference",
                                                found=type(fields.reference).__name__))
    if fields.references is not None:
        if isinstance(fields.references, (str, bytes)) or not isinstance(fields.references, Sequence):
            raise reject(InvalidArgumentType.create("start_span", "references must be a sequence of Reference",
                                                    found=type(fields.references).__name__))
        if bad := [type(r).__name__ for r in fields.references if not isinstance(r, Reference)]:
            raise reject(InvalidArgumentType.create("start_span", "references must be a sequence of Reference",
                                                    found=bad))
    if fields.tags is not None and not isinstance(fields.tags, Mapping):
        raise reject(InvalidArgumentType.create("start_span", "tags must be a mapping",
                                                found=type(fields.tags).__name__))
    if fields.start_time is not None and (
        isinstance(fields.start_time, bool) or not isinstance(fields.start_time, (int, float))
    ):
        raise reject(InvalidArgumentType.create("start_span", "start_time must be epoch milliseconds",
                                                found=type(fields.start_time).__name__))
