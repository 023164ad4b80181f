"""Digital filter design and real-time filtering engine."""

import logging

from sigfilt.errors import (
    FilterError,
    InvalidCoefficientError,
    InvalidSpecificationError,
    NumericalFailureError,
    OrderMismatchError,
    RateMismatchError,
)
from sigfilt.models import DiscreteSignal
from sigfilt.transfer_function import (
    FrequencyResponse,
    TransferFunction,
    parallel_combine,
    series_combine,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "DiscreteSignal",
    "FilterError",
    "FrequencyResponse",
    "InvalidCoefficientError",
    "InvalidSpecificationError",
    "NumericalFailureError",
    "OrderMismatchError",
    "RateMismatchError",
    "TransferFunction",
    "parallel_combine",
    "series_combine",
]
