"""tracekit - vendor-neutral tracing facade.

Instrument code against Tracer / Span / SpanContext once; plug in any backend
that implements SpanBackend. With no backend installed every call is a no-op.

Quick Start:
    >>> from tracekit import FORMAT_TEXT_MAP, child_of, global_tracer, init_global_tracer
    >>> from tracekit.mock import MockBackend
    >>>
    >>> init_global_tracer(MockBackend())      # once, at startup
    >>> tracer = global_tracer()
    >>>
    >>> with tracer.start_span("checkout", {"tags": {"cart.items": 3}}) as span:
    ...     headers: dict[str, str] = {}
    ...     tracer.inject(span.context(), FORMAT_TEXT_MAP, headers)

Receiving side:
    >>> parent = tracer.extract(FORMAT_TEXT_MAP, request.headers)
    >>> with tracer.start_span("charge", {"reference": child_of(parent)}):
    ...     ...

Configuration (environment, see tracekit.config):
    TRACEKIT_CONFORMANCE_CHECKS=false  # skip argument validation on hot paths
    TRACEKIT_LOG_LEVEL=DEBUG
"""

from .backend import NOOP_BACKEND, NoopBackend, SpanBackend, SpanHandle
from .config import TracekitSettings, clear_settings_cache, get_settings
from .constants import (
    FORMAT_BINARY,
    FORMAT_TEXT_MAP,
    REFERENCE_CHILD_OF,
    REFERENCE_FOLLOWS_FROM,
    BinaryCarrier,
    Format,
    ReferenceType,
)
from .errors import (
    ApiError,
    ConflictingReferences,
    ConformanceError,
    EmptyOperationName,
    ErrorCode,
    InvalidArgumentCount,
    InvalidArgumentType,
    InvalidCarrierType,
    InvalidSpanContextType,
    MissingOperationName,
)
from .fields import SpanFields
from .global_tracer import (
    global_tracer,
    init_global_tracer,
    is_global_tracer_registered,
    reset_global_tracer,
    set_global_tracer,
)
from .logging import configure_logging, get_logger
from .reference import Reference, child_of, follows_from
from .span import Span
from .span_context import SpanContext
from .tracer import Tracer

__version__ = "0.1.0"

__all__ = [
    # Facade
    "Tracer", "Span", "SpanContext", "SpanFields",
    # References
    "Reference", "child_of", "follows_from",
    # Constants
    "Format", "FORMAT_TEXT_MAP", "FORMAT_BINARY", "BinaryCarrier",
    "ReferenceType", "REFERENCE_CHILD_OF", "REFERENCE_FOLLOWS_FROM",
    # Backend interface
    "SpanBackend", "SpanHandle", "NoopBackend", "NOOP_BACKEND",
    # Global tracer
    "global_tracer", "init_global_tracer", "set_global_tracer", "is_global_tracer_registered",
    "reset_global_tracer",
    # Errors
    "ErrorCode", "ApiError", "ConformanceError", "InvalidArgumentCount", "InvalidArgumentType",
    "EmptyOperationName", "MissingOperationName", "ConflictingReferences", "InvalidSpanContextType",
    "InvalidCarrierType",
    # Configuration & logging
    "TracekitSettings", "get_settings", "clear_settings_cache", "configure_logging", "get_logger",
]
