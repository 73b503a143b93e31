"""Tracer: the entry point between instrumentation code and a tracing backend.

A Tracer holds at most one backend and no other state. Without a backend every
operation is a safe no-op, so libraries can instrument unconditionally.

Usage:
    >>> tracer = Tracer(MockBackend())
    >>> with tracer.start_span("handle_request", {"tags": {"http.method": "GET"}}) as span:
    ...     headers: dict[str, str] = {}
    ...     tracer.inject(span.context(), FORMAT_TEXT_MAP, headers)
    ...     send(headers)

    >>> # Server side
    >>> parent = tracer.extract(FORMAT_TEXT_MAP, request.headers)
    >>> span = tracer.start_span("serve", {"reference": child_of(parent)})
"""

from __future__ import annotations

import array
from collections.abc import Mapping, Sequence
from typing import Any, overload

from tracekit.backend import NOOP_BACKEND, FlushCallback, SpanBackend
from tracekit.config import get_settings
from tracekit.constants import FORMAT_BINARY, FORMAT_TEXT_MAP
from tracekit.errors import (
    InvalidArgumentCount,
    InvalidArgumentType,
    InvalidCarrierType,
    InvalidSpanContextType,
)
from tracekit.fields import SpanFields, normalize_start_span_args, reject
from tracekit.logging import get_logger
from tracekit.reference import child_of, follows_from
from tracekit.span import Span
from tracekit.span_context import SpanContext

_log = get_logger("tracekit.tracer")


class Tracer:
    """Creates spans and propagates their contexts across process boundaries.

    Args:
        imp: Backend implementing SpanBackend; None makes the tracer a no-op
        strict_validation: Run conformance checks on every call. None means
            ``TracekitSettings.conformance_checks`` (default True). Turning
            them off forwards malformed input to the backend unchecked.

    Application code normally obtains the process tracer from global_tracer()
    rather than constructing one.
    """

    __slots__ = ("_imp", "_backend", "_strict")

    FORMAT_TEXT_MAP = FORMAT_TEXT_MAP
    FORMAT_BINARY = FORMAT_BINARY

    child_of = staticmethod(child_of)
    follows_from = staticmethod(follows_from)

    def __init__(self, imp: SpanBackend | None = None, *, strict_validation: bool | None = None) -> None:
        self._imp = imp
        self._backend: SpanBackend = imp if imp is not None else NOOP_BACKEND
        self._strict = get_settings().conformance_checks if strict_validation is None else strict_validation
        _log.debug("tracer created", backend=type(imp).__name__ if imp is not None else "noop",
                   strict_validation=self._strict)

    @property
    def strict_validation(self) -> bool:
        return self._strict

    # ─────────────────────────────────────────────────────────────────────────
    # Span creation
    # ─────────────────────────────────────────────────────────────────────────

    @overload
    def start_span(self, operation_name: str, /) -> Span: ...
    @overload
    def start_span(self, operation_name: str, fields: Mapping[str, Any] | SpanFields | None, /) -> Span: ...
    @overload
    def start_span(self, fields: Mapping[str, Any] | SpanFields, /) -> Span: ...

    def start_span(self, *args: Any) -> Span:
        """Start and return a new Span.

        Args:
            operation_name | fields: Either the operation name (a non-empty
                string, optionally followed by a fields mapping) or a single
                fields mapping containing ``operation_name``.
            fields: Optional mapping with keys
                ``reference`` - one Reference to a causal parent,
                ``references`` - a list of References (exclusive with ``reference``),
                ``tags`` - initial tags; ownership passes to the span, so the
                caller must not modify the dict afterwards,
                ``start_time`` - Unix epoch milliseconds, fractional allowed.

        Raises:
            InvalidArgumentCount, InvalidArgumentType, EmptyOperationName,
            MissingOperationName, ConflictingReferences: when strict validation is on.
        """
        fields = normalize_start_span_args(args, strict=self._strict)
        return Span(self._backend.create_span(fields))

    # ─────────────────────────────────────────────────────────────────────────
    # Propagation
    # ─────────────────────────────────────────────────────────────────────────

    def inject(self, *args: Any) -> None:
        """inject(span_context, format, carrier): serialize ``span_context`` into ``carrier``.

        FORMAT_TEXT_MAP carriers are writable str -> str maps: dicts, or header
        objects such as http.client.HTTPMessage. A FORMAT_BINARY carrier is any
        non-mapping object whose ``buffer`` attribute exists or can be assigned;
        the backend sets it to the encoded bytes. BinaryCarrier is a ready-made
        one. Other formats are passed to the backend unvalidated. With no backend
        the carrier is untouched.
        """
        if self._strict:
            _check_inject(args)
        span_context, fmt, carrier = _pad(args, 3)
        self._backend.inject(span_context.imp() if isinstance(span_context, SpanContext) else span_context,
                             fmt, carrier)

    def extract(self, *args: Any) -> SpanContext:
        """extract(format, carrier): rebuild a SpanContext from ``carrier``.

        A carrier holding no trace data yields an empty SpanContext rather than
        an error; it can still be used as a (vacuous) parent reference.
        """
        if self._strict:
            _check_extract(args)
        fmt, carrier = _pad(args, 2)
        return SpanContext(self._backend.extract(fmt, carrier))

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def flush(self, *args: Any) -> None:
        """flush(done=None): ask the backend to push out buffered data.

        ``done(error)`` is called once on completion, ``error`` None on success.
        Without a backend it is called immediately; timing otherwise belongs to
        the backend.
        """
        if self._strict:
            if len(args) > 1:
                raise reject(InvalidArgumentCount.create("flush", "Invalid number of arguments.",
                                                         expected="0 or 1", got=len(args)))
            if args and args[0] is not None and not callable(args[0]):
                raise reject(InvalidArgumentType.create("flush", "callback expected to be callable",
                                                        found=type(args[0]).__name__))
        done: FlushCallback | None = args[0] if args else None
        self._backend.flush(done)

    def imp(self) -> SpanBackend | None:
        """Raw backend, or None.

        Use only when backend-specific functionality cannot be reached otherwise:
        code calling this is no longer portable across backends.
        """
        return self._imp

    def __repr__(self) -> str:
        return f"Tracer({type(self._imp).__name__ if self._imp is not None else 'noop'})"


def _pad(args: tuple[Any, ...], n: int) -> tuple[Any, ...]:
    return (*args, *([None] * n))[:n]


def _check_format(operation: str, fmt: Any) -> None:
    if not isinstance(fmt, str) or not fmt:
        raise reject(InvalidArgumentType.create(operation, "format is expected to be a string of non-zero length",
                                                found=fmt))


def _check_inject(args: tuple[Any, ...]) -> None:
    if len(args) != 3:
        raise reject(InvalidArgumentCount.create("inject", "Invalid number of arguments.", expected=3, got=len(args)))
    span_context, fmt, carrier = args
    if not isinstance(span_context, SpanContext):
        raise reject(InvalidSpanContextType.create("inject", "Expected SpanContext object as first argument",
                                                   found=type(span_context).__name__))
    _check_format("inject", fmt)
    if fmt == FORMAT_TEXT_MAP and not (_is_text_map(carrier) and hasattr(carrier, "__setitem__")):
        raise reject(InvalidCarrierType.create("inject", "Unexpected carrier object for FORMAT_TEXT_MAP",
                                               found=type(carrier).__name__))
    if fmt == FORMAT_BINARY and not _is_binary_carrier(carrier):
        raise reject(InvalidCarrierType.create("inject", "FORMAT_BINARY carrier needs a settable `buffer` attribute",
                                               found=type(carrier).__name__))


def _check_extract(args: tuple[Any, ...]) -> None:
    if len(args) != 2:
        raise reject(InvalidArgumentCount.create("extract", "Invalid number of arguments.", expected=2, got=len(args)))
    fmt, carrier = args
    _check_format("extract", fmt)
    if fmt == FORMAT_TEXT_MAP and not _is_text_map(carrier):
        raise reject(InvalidCarrierType.create("extract", "Unexpected carrier object for FORMAT_TEXT_MAP",
                                               found=type(carrier).__name__))
    if fmt == FORMAT_BINARY:
        if not _is_binary_carrier(carrier):
            raise reject(InvalidCarrierType.create("extract", "FORMAT_BINARY carrier needs a `buffer` attribute",
                                                   found=type(carrier).__name__))
        buffer = getattr(carrier, "buffer", None)
        if buffer is not None and not _is_array_like(buffer):
            raise reject(InvalidCarrierType.create("extract", "FORMAT_BINARY buffer must be bytes-like",
                                                   found=type(buffer).__name__))


def _is_text_map(carrier: object) -> bool:
    """Header-like carrier: dicts, http.client.HTTPMessage, framework header objects."""
    return isinstance(carrier, Mapping) or (hasattr(carrier, "items") and hasattr(carrier, "__getitem__"))


def _is_binary_carrier(carrier: object) -> bool:
    """Object whose ``buffer`` attribute exists or can be assigned. Mappings never qualify."""
    if carrier is None or isinstance(carrier, Mapping):
        return False
    if hasattr(carrier, "buffer") or hasattr(carrier, "__dict__"):
        return True
    return any("buffer" in getattr(klass, "__slots__", ()) for klass in type(carrier).__mro__)


def _is_array_like(buffer: object) -> bool:
    if isinstance(buffer, (bytes, bytearray, memoryview, array.array)):
        return True
    return isinstance(buffer, Sequence) and not isinstance(buffer, str)
