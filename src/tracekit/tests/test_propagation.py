"""Tests for Tracer.inject / Tracer.extract."""

from __future__ import annotations

import array
from http.client import HTTPMessage
from types import MappingProxyType, SimpleNamespace

import orjson
import pytest

from tracekit import (
    FORMAT_BINARY,
    FORMAT_TEXT_MAP,
    REFERENCE_FOLLOWS_FROM,
    BinaryCarrier,
    InvalidArgumentCount,
    InvalidArgumentType,
    InvalidCarrierType,
    InvalidSpanContextType,
    SpanContext,
    Tracer,
    child_of,
)
from tracekit.mock import SPAN_ID_KEY, TRACE_ID_KEY, MockBackend, UnsupportedFormatError


# ═════════════════════════════════════════════════════════════════════════════
# Round trips with a backend installed
# ═════════════════════════════════════════════════════════════════════════════


def test_text_map_round_trip(tracer: Tracer) -> None:
    span = tracer.start_span("client").set_baggage_item("user", "42")
    headers: dict[str, str] = {}
    tracer.inject(span.context(), FORMAT_TEXT_MAP, headers)

    assert headers[TRACE_ID_KEY] == span.imp().ctx.trace_id
    extracted = tracer.extract(FORMAT_TEXT_MAP, headers)
    assert extracted.imp().trace_id == span.imp().ctx.trace_id
    assert extracted.imp().span_id == span.imp().ctx.span_id
    assert extracted.imp().baggage == {"user": "42"}


def test_reinjecting_extracted_context_preserves_identity(tracer: Tracer) -> None:
    span = tracer.start_span("origin")
    first: dict[str, str] = {}
    tracer.inject(span.context(), FORMAT_TEXT_MAP, first)

    second: dict[str, str] = {}
    tracer.inject(tracer.extract(FORMAT_TEXT_MAP, first), FORMAT_TEXT_MAP, second)
    again = tracer.extract(FORMAT_TEXT_MAP, second).imp()
    assert (again.trace_id, again.span_id) == (span.imp().ctx.trace_id, span.imp().ctx.span_id)


def test_binary_round_trip(tracer: Tracer) -> None:
    span = tracer.start_span("client")
    carrier = BinaryCarrier()
    tracer.inject(span.context(), FORMAT_BINARY, carrier)

    assert isinstance(carrier.buffer, bytes)
    extracted = tracer.extract(FORMAT_BINARY, BinaryCarrier(buffer=bytearray(carrier.buffer)))
    assert extracted.imp().span_id == span.imp().ctx.span_id


def test_server_span_continues_remote_trace(tracer: Tracer, backend: MockBackend) -> None:
    client = tracer.start_span("client")
    headers: dict[str, str] = {}
    tracer.inject(client.context(), FORMAT_TEXT_MAP, headers)

    server = tracer.start_span("server", {"reference": child_of(tracer.extract(FORMAT_TEXT_MAP, headers))})
    assert server.imp().ctx.trace_id == client.imp().ctx.trace_id
    assert server.imp().parent_id == client.imp().ctx.span_id


def test_extract_empty_text_map_never_raises(tracer: Tracer) -> None:
    ctx = tracer.extract(FORMAT_TEXT_MAP, {})
    assert isinstance(ctx, SpanContext)
    assert ctx.is_noop
    tracer.start_span("child", {"reference": child_of(ctx)})


def test_extract_binary_without_buffer_is_empty(tracer: Tracer) -> None:
    assert tracer.extract(FORMAT_BINARY, BinaryCarrier()).is_noop
    assert tracer.extract(FORMAT_BINARY, SimpleNamespace()).is_noop


def test_extract_corrupt_binary_degrades_to_empty(tracer: Tracer) -> None:
    assert tracer.extract(FORMAT_BINARY, BinaryCarrier(buffer=b"\x00not json")).is_noop
    assert tracer.extract(FORMAT_BINARY, BinaryCarrier(buffer=orjson.dumps({"trace_id": "a"}))).is_noop


def test_inject_noop_context_leaves_carrier_untouched(tracer: Tracer) -> None:
    carrier = {"existing": "header"}
    tracer.inject(SpanContext(), FORMAT_TEXT_MAP, carrier)
    assert carrier == {"existing": "header"}


def test_unknown_format_reaches_backend(tracer: Tracer) -> None:
    span = tracer.start_span("x")
    with pytest.raises(UnsupportedFormatError):
        tracer.inject(span.context(), "vendor/custom", {})
    with pytest.raises(UnsupportedFormatError):
        tracer.extract("vendor/custom", object())


# ═════════════════════════════════════════════════════════════════════════════
# No backend installed
# ═════════════════════════════════════════════════════════════════════════════


def test_inject_without_backend_is_noop(noop_tracer: Tracer, tracer: Tracer) -> None:
    real_context = tracer.start_span("real").context()
    carrier: dict[str, str] = {}
    noop_tracer.inject(real_context, FORMAT_TEXT_MAP, carrier)
    binary = BinaryCarrier()
    noop_tracer.inject(noop_tracer.start_span("x").context(), FORMAT_BINARY, binary)
    assert carrier == {}
    assert binary.buffer is None


def test_extract_without_backend_is_always_empty(noop_tracer: Tracer) -> None:
    populated = {TRACE_ID_KEY: "abc", SPAN_ID_KEY: "def"}
    assert noop_tracer.extract(FORMAT_TEXT_MAP, populated).imp() is None
    assert noop_tracer.extract(FORMAT_BINARY, BinaryCarrier(buffer=b"{}")).imp() is None


def test_unknown_format_accepted_without_backend(noop_tracer: Tracer) -> None:
    noop_tracer.inject(SpanContext(), "vendor/custom", 12)
    assert noop_tracer.extract("vendor/custom", None).is_noop


# ═════════════════════════════════════════════════════════════════════════════
# Conformance checks
# ═════════════════════════════════════════════════════════════════════════════


def test_inject_argument_count(tracer: Tracer) -> None:
    ctx = tracer.start_span("x").context()
    with pytest.raises(InvalidArgumentCount):
        tracer.inject(ctx, FORMAT_TEXT_MAP)
    with pytest.raises(InvalidArgumentCount):
        tracer.inject(ctx, FORMAT_TEXT_MAP, {}, {})


@pytest.mark.parametrize("bad_context", [None, {}, "ctx"])
def test_inject_requires_span_context(tracer: Tracer, bad_context: object) -> None:
    with pytest.raises(InvalidSpanContextType):
        tracer.inject(bad_context, FORMAT_TEXT_MAP, {})


def test_inject_rejects_span_in_place_of_context(tracer: Tracer) -> None:
    with pytest.raises(InvalidSpanContextType):
        tracer.inject(tracer.start_span("x"), FORMAT_TEXT_MAP, {})


@pytest.mark.parametrize("fmt", ["", None, 7])
def test_inject_format_must_be_non_empty_string(tracer: Tracer, fmt: object) -> None:
    with pytest.raises(InvalidArgumentType):
        tracer.inject(SpanContext(), fmt, {})


@pytest.mark.parametrize("carrier", [None, "headers", ("k", "v"), frozenset()])
def test_inject_text_map_carrier(tracer: Tracer, carrier: object) -> None:
    with pytest.raises(InvalidCarrierType):
        tracer.inject(SpanContext(), FORMAT_TEXT_MAP, carrier)


@pytest.mark.parametrize("carrier", [None, b"raw", object()])
def test_inject_binary_carrier(tracer: Tracer, carrier: object) -> None:
    with pytest.raises(InvalidCarrierType):
        tracer.inject(SpanContext(), FORMAT_BINARY, carrier)


def test_extract_argument_count(tracer: Tracer) -> None:
    with pytest.raises(InvalidArgumentCount):
        tracer.extract(FORMAT_TEXT_MAP)
    with pytest.raises(InvalidArgumentCount):
        tracer.extract(FORMAT_TEXT_MAP, {}, {})


@pytest.mark.parametrize("fmt", ["", None])
def test_extract_format_must_be_non_empty_string(tracer: Tracer, fmt: object) -> None:
    with pytest.raises(InvalidArgumentType):
        tracer.extract(fmt, {})


@pytest.mark.parametrize("carrier", [None, "headers", 3])
def test_extract_text_map_carrier(tracer: Tracer, carrier: object) -> None:
    with pytest.raises(InvalidCarrierType):
        tracer.extract(FORMAT_TEXT_MAP, carrier)


@pytest.mark.parametrize("buffer", ["text", 12, {"a": 1}])
def test_extract_binary_buffer_must_be_array_like(tracer: Tracer, buffer: object) -> None:
    with pytest.raises(InvalidCarrierType):
        tracer.extract(FORMAT_BINARY, SimpleNamespace(buffer=buffer))


@pytest.mark.parametrize("buffer", [b"", bytearray(), memoryview(b""), [], array.array("B")])
def test_extract_binary_accepts_array_likes(tracer: Tracer, buffer: object) -> None:
    assert tracer.extract(FORMAT_BINARY, SimpleNamespace(buffer=buffer)).is_noop


def test_extract_binary_rejects_none_carrier(tracer: Tracer) -> None:
    with pytest.raises(InvalidCarrierType):
        tracer.extract(FORMAT_BINARY, None)


def test_propagation_checks_can_be_disabled(backend: MockBackend) -> None:
    tracer = Tracer(backend, strict_validation=False)
    tracer.inject(SpanContext(), FORMAT_TEXT_MAP)
    assert tracer.extract(FORMAT_TEXT_MAP, {"unrelated": "x"}).is_noop


# ═════════════════════════════════════════════════════════════════════════════
# Header objects and binary carrier shapes
# ═════════════════════════════════════════════════════════════════════════════


def test_text_map_round_trip_through_http_message(tracer: Tracer) -> None:
    span = tracer.start_span("client").set_baggage_item("user", "42")
    outgoing = HTTPMessage()
    tracer.inject(span.context(), FORMAT_TEXT_MAP, outgoing)
    assert outgoing[TRACE_ID_KEY] == span.imp().ctx.trace_id

    plain: dict[str, str] = {}
    tracer.inject(span.context(), FORMAT_TEXT_MAP, plain)
    incoming = HTTPMessage()
    for key, value in plain.items():
        incoming[key.title()] = value

    for carrier in (outgoing, incoming):
        extracted = tracer.extract(FORMAT_TEXT_MAP, carrier).imp()
        assert (extracted.trace_id, extracted.span_id) == (span.imp().ctx.trace_id, span.imp().ctx.span_id)
        assert extracted.baggage == {"user": "42"}


def test_inject_text_map_rejects_read_only_mapping(tracer: Tracer) -> None:
    with pytest.raises(InvalidCarrierType):
        tracer.inject(SpanContext(), FORMAT_TEXT_MAP, MappingProxyType({}))
    with pytest.raises(InvalidCarrierType):
        tracer.inject(SpanContext(), FORMAT_TEXT_MAP, [])


class _SlottedCarrier:
    __slots__ = ("buffer",)


@pytest.mark.parametrize("carrier_type", [SimpleNamespace, _SlottedCarrier])
def test_binary_inject_sets_missing_buffer(tracer: Tracer, carrier_type: type) -> None:
    span = tracer.start_span("client")
    carrier = carrier_type()
    tracer.inject(span.context(), FORMAT_BINARY, carrier)

    assert isinstance(carrier.buffer, bytes)
    assert tracer.extract(FORMAT_BINARY, carrier).imp().span_id == span.imp().ctx.span_id


def test_binary_carrier_rule_rejects_mappings_both_ways(tracer: Tracer) -> None:
    payload = orjson.dumps({"trace_id": "a", "span_id": "b"})
    with pytest.raises(InvalidCarrierType):
        tracer.inject(tracer.start_span("x").context(), FORMAT_BINARY, {"buffer": None})
    with pytest.raises(InvalidCarrierType):
        tracer.extract(FORMAT_BINARY, {"buffer": payload})
    with pytest.raises(InvalidCarrierType):
        tracer.extract(FORMAT_BINARY, object())


def test_reference_helpers_on_tracer(tracer: Tracer) -> None:
    parent = tracer.start_span("parent")
    child = tracer.start_span("child", {"reference": Tracer.child_of(parent.context())})
    batch = tracer.start_span("batch", {"references": [tracer.follows_from(parent)]})
    assert child.imp().parent_id == parent.imp().ctx.span_id
    assert batch.imp().references[0].type == REFERENCE_FOLLOWS_FROM
