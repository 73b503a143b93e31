"""Process-wide tracer registration.

Applications install one tracer at startup; libraries read it lazily:

    >>> # main.py
    >>> init_global_tracer(MyVendorBackend(service="checkout"))
    >>>
    >>> # some_library.py
    >>> span = global_tracer().start_span("charge_card")

Until something is installed, global_tracer() returns a no-op Tracer.
"""

from __future__ import annotations

from tracekit.backend import SpanBackend
from tracekit.errors import InvalidArgumentType
from tracekit.fields import reject
from tracekit.logging import get_logger
from tracekit.tracer import Tracer

_log = get_logger("tracekit.global_tracer")

_NOOP_TRACER = Tracer()
_global: Tracer = _NOOP_TRACER
_registered = False


def global_tracer() -> Tracer:
    """The installed tracer, or a shared no-op Tracer if none was installed."""
    return _global


def set_global_tracer(tracer: Tracer) -> Tracer:
    """Install ``tracer`` as the process tracer."""
    global _global, _registered
    if not isinstance(tracer, Tracer):
        raise reject(InvalidArgumentType.create("set_global_tracer", "expected a Tracer",
                                                found=type(tracer).__name__))
    _global, _registered = tracer, True
    _log.info("global tracer installed", tracer=repr(tracer))
    return tracer


def init_global_tracer(imp: SpanBackend | None, *, strict_validation: bool | None = None) -> Tracer:
    """Wrap ``imp`` in a Tracer and install it as the process tracer."""
    return set_global_tracer(Tracer(imp, strict_validation=strict_validation))


def is_global_tracer_registered() -> bool:
    return _registered


def reset_global_tracer() -> None:
    """Go back to the no-op tracer (for tests)."""
    global _global, _registered
    _global, _registered = _NOOP_TRACER, False
