"""In-memory backend for asserting on instrumentation."""

from .backend import BAGGAGE_PREFIX, SPAN_ID_KEY, TRACE_ID_KEY, MockBackend, UnsupportedFormatError
from .report import MockReport
from .span import MockContextHandle, MockLog, MockReferenceRecord, MockSpanHandle

__all__ = [
    "MockBackend",
    "MockContextHandle",
    "MockLog",
    "MockReferenceRecord",
    "MockReport",
    "MockSpanHandle",
    "UnsupportedFormatError",
    "TRACE_ID_KEY",
    "SPAN_ID_KEY",
    "BAGGAGE_PREFIX",
]
