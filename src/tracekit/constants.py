"""Propagation formats and reference types shared by inject/extract and start_span.

Each format implies a carrier shape:
- FORMAT_TEXT_MAP: a mutable mapping of str -> str (e.g. HTTP headers dict)
- FORMAT_BINARY: any object with a settable ``buffer`` attribute holding bytes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Format(StrEnum):
    """Closed set of propagation formats understood by every backend."""

    TEXT_MAP = "text_map"
    BINARY = "binary"


class ReferenceType(StrEnum):
    """Causal relationship between a new span and an existing context."""

    CHILD_OF = "child_of"
    FOLLOWS_FROM = "follows_from"


FORMAT_TEXT_MAP = Format.TEXT_MAP
FORMAT_BINARY = Format.BINARY

REFERENCE_CHILD_OF = ReferenceType.CHILD_OF
REFERENCE_FOLLOWS_FROM = ReferenceType.FOLLOWS_FROM


@dataclass(slots=True)
class BinaryCarrier:
    """Ready-made carrier for FORMAT_BINARY. Backends set ``buffer`` on inject."""

    buffer: bytes | bytearray | None = None
