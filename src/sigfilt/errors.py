"""Error types for filter design and processing.

Error taxonomy:
- SPEC: Invalid specification (bad rates, frequencies, ranges, lengths)
- COEF: Invalid coefficients (zero normalization pivot, empty or non-finite values)
- NUM: Numerical failures (root solver non-convergence, degenerate responses)
- ORDER: Coefficient replacement with a different filter order
- RATE: Signals with different sampling rates combined together

Every error is raised synchronously by the call that detected it. Nothing in
the package retries.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorCategory(Enum):
    """Error category for classification."""

    SPEC = "SPEC"
    COEF = "COEF"
    NUM = "NUM"
    ORDER = "ORDER"
    RATE = "RATE"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Additional context for an error.

    Attributes:
        parameter: Name of the offending parameter or quantity.
        expected: What the call expected (value, length or constraint).
        actual: What the call received.
        original_error: The underlying exception message, if any.
    """

    parameter: Optional[str] = None
    expected: Optional[Any] = None
    actual: Optional[Any] = None
    original_error: Optional[str] = None


class FilterError(Exception):
    """Base exception for all sigfilt errors.

    Attributes:
        category: Error category for classification.
        code: Short error code (e.g., "SPEC-001").
        message: Human-readable error message.
        context: Additional error context.
    """

    def __init__(
        self,
        category: ErrorCategory,
        code: str,
        message: str,
        context: Optional[ErrorContext] = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.code = code
        self.message = message
        self.context = context or ErrorContext()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidSpecificationError(FilterError, ValueError):
    """A design or construction argument is out of its valid domain."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        expected: Optional[Any] = None,
        actual: Optional[Any] = None,
    ) -> None:
        context = ErrorContext(parameter=parameter, expected=expected, actual=actual)
        super().__init__(ErrorCategory.SPEC, "SPEC-001", message, context)


class InvalidCoefficientError(FilterError, ValueError):
    """Coefficients cannot be normalized or executed."""

    def __init__(self, message: str, parameter: Optional[str] = None, actual: Optional[Any] = None) -> None:
        context = ErrorContext(parameter=parameter, actual=actual)
        super().__init__(ErrorCategory.COEF, "COEF-001", message, context)


class NumericalFailureError(FilterError, ArithmeticError):
    """A numerical routine failed to produce a finite result."""

    def __init__(self, operation: str, reason: str) -> None:
        context = ErrorContext(parameter=operation, original_error=reason)
        super().__init__(
            ErrorCategory.NUM,
            "NUM-001",
            f"Numerical failure in {operation}: {reason}",
            context,
        )


class OrderMismatchError(FilterError):
    """Replacement coefficients do not match the live filter's order."""

    def __init__(self, what: str, expected: int, actual: int) -> None:
        context = ErrorContext(parameter=what, expected=expected, actual=actual)
        super().__init__(
            ErrorCategory.ORDER,
            "ORDER-001",
            f"Cannot change {what}: expected {expected} coefficients, got {actual}.",
            context,
        )


class RateMismatchError(FilterError):
    """Two signals with different sampling rates were combined."""

    def __init__(self, expected: int, actual: int) -> None:
        context = ErrorContext(parameter="sampling_rate", expected=expected, actual=actual)
        super().__init__(
            ErrorCategory.RATE,
            "RATE-001",
            f"Sampling rates differ: {expected} Hz vs {actual} Hz.",
            context,
        )


def ensure_range(lower: float, upper: float, lower_name: str, upper_name: str) -> None:
    """Raise InvalidSpecificationError unless lower < upper."""
    if not lower < upper:
        raise InvalidSpecificationError(
            f"{lower_name} ({lower}) must be less than {upper_name} ({upper})",
            parameter=lower_name,
            expected=f"< {upper}",
            actual=lower,
        )


def ensure_positive(value: float, name: str) -> None:
    """Raise InvalidSpecificationError unless value > 0."""
    if not value > 0:
        raise InvalidSpecificationError(
            f"{name} must be positive, got {value}",
            parameter=name,
            expected="> 0",
            actual=value,
        )


def ensure_normalized_frequency(freq: float, name: str = "freq") -> None:
    """Raise InvalidSpecificationError unless 0 < freq < 0.5."""
    if not 0.0 < freq < 0.5:
        raise InvalidSpecificationError(
            f"{name} must be in (0, 0.5) as a fraction of the sampling rate, got {freq}",
            parameter=name,
            expected="(0, 0.5)",
            actual=freq,
        )
