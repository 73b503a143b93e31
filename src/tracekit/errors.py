"""Conformance errors raised by the facade.

Every error here is a caller programming error raised synchronously by a
conformance check. Errors raised by an installed backend are never wrapped.

Each code maps to an exception subclass that also inherits the matching
builtin, so ``except TypeError`` keeps working for callers that don't know
about tracekit.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field

JsonDict = dict[str, Any]


class ErrorCode(StrEnum):
    """Machine-readable classification of API misuse."""

    INVALID_ARGUMENT_COUNT = "INVALID_ARGUMENT_COUNT"
    INVALID_ARGUMENT_TYPE = "INVALID_ARGUMENT_TYPE"
    EMPTY_OPERATION_NAME = "EMPTY_OPERATION_NAME"
    MISSING_OPERATION_NAME = "MISSING_OPERATION_NAME"
    CONFLICTING_REFERENCES = "CONFLICTING_REFERENCES"
    INVALID_SPAN_CONTEXT_TYPE = "INVALID_SPAN_CONTEXT_TYPE"
    INVALID_CARRIER_TYPE = "INVALID_CARRIER_TYPE"


class ApiError(BaseModel):
    """Structured description of a failed conformance check.

    Attributes:
        operation: Facade entry point that rejected the call (e.g. "start_span")
        message: Human-readable explanation
        code: Machine-readable error code
        details: Offending values, rendered with repr() for safety
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "title": "API Error",
            "examples": [{
                "operation": "inject",
                "message": "Invalid number of arguments.",
                "code": "INVALID_ARGUMENT_COUNT",
                "details": {"expected": "3", "got": "2"},
            }],
        },
    )

    operation: Annotated[str, Field(min_length=1)]
    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode
    details: dict[str, str] = Field(default_factory=dict)

    @computed_field
    @property
    def is_type_error(self) -> bool:
        """Whether the failure concerns a value's runtime shape rather than its content."""
        return self.code not in _VALUE_CODES

    def render(self) -> str:
        extra = f" ({', '.join(f'{k}={v}' for k, v in self.details.items())})" if self.details else ""
        return f"{self.operation}: {self.message}{extra}"

    __str__ = render


_VALUE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.EMPTY_OPERATION_NAME,
    ErrorCode.MISSING_OPERATION_NAME,
    ErrorCode.CONFLICTING_REFERENCES,
})


class ConformanceError(Exception):
    """Base exception wrapping an ApiError."""

    code: ClassVar[ErrorCode | None] = None
    _by_code: ClassVar[dict[ErrorCode, type[ConformanceError]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.code is not None:
            ConformanceError._by_code[cls.code] = cls

    def __init__(self, error: ApiError) -> None:
        self.error = error
        super().__init__(error.render())

    @classmethod
    def create(cls, operation: str, message: str, code: ErrorCode | None = None, **details: object) -> Self:
        """Build the exception subclass registered for ``code`` (defaults to the class's own code)."""
        code = code or cls.code
        if code is None:
            raise ValueError("ConformanceError.create() needs an error code")
        exc_type = ConformanceError._by_code.get(code, cls)
        error = ApiError(operation=operation, message=message, code=code,
                         details={k: repr(v) for k, v in details.items()})
        return exc_type(error)  # type: ignore[return-value]


class InvalidArgumentCount(ConformanceError, TypeError):
    code = ErrorCode.INVALID_ARGUMENT_COUNT


class InvalidArgumentType(ConformanceError, TypeError):
    code = ErrorCode.INVALID_ARGUMENT_TYPE


class EmptyOperationName(ConformanceError, ValueError):
    code = ErrorCode.EMPTY_OPERATION_NAME


class MissingOperationName(ConformanceError, ValueError):
    code = ErrorCode.MISSING_OPERATION_NAME


class ConflictingReferences(ConformanceError, ValueError):
    code = ErrorCode.CONFLICTING_REFERENCES


class InvalidSpanContextType(ConformanceError, TypeError):
    code = ErrorCode.INVALID_SPAN_CONTEXT_TYPE


class InvalidCarrierType(ConformanceError, TypeError):
    code = ErrorCode.INVALID_CARRIER_TYPE
