"""Shared fixtures for tracekit tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from tracekit import Tracer, clear_settings_cache, reset_global_tracer
from tracekit.logging import configure_logging, reset_logging
from tracekit.mock import MockBackend


@pytest.fixture(autouse=True)
def isolated_state() -> Iterator[None]:
    """Fresh settings, silent logs and no global tracer for every test."""
    clear_settings_cache()
    reset_global_tracer()
    configure_logging(format="none")
    yield
    reset_logging()
    reset_global_tracer()
    clear_settings_cache()


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def tracer(backend: MockBackend) -> Tracer:
    return Tracer(backend, strict_validation=True)


@pytest.fixture
def noop_tracer() -> Tracer:
    return Tracer(strict_validation=True)
