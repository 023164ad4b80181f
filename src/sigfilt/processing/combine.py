"""Runtime variant selection for combined filters.

Series and parallel algebra happens on :class:`TransferFunction` values;
these helpers decide which runtime filter executes the result: FIR when the
combined denominator is a constant, IIR otherwise.
"""

from __future__ import annotations

from sigfilt.processing.base import LtiFilter
from sigfilt.processing.fir import FirFilter
from sigfilt.processing.iir import IirFilter
from sigfilt.transfer_function import TransferFunction, parallel_combine, series_combine


def _tf_of(item: LtiFilter | TransferFunction) -> TransferFunction:
    return item if isinstance(item, TransferFunction) else item.tf


def make_filter(tf: TransferFunction) -> FirFilter | IirFilter:
    """Instantiate a fresh FIR filter for FIR systems, IIR otherwise."""
    return FirFilter(tf) if tf.is_fir else IirFilter(tf)


def combine_series(
    first: LtiFilter | TransferFunction, second: LtiFilter | TransferFunction
) -> FirFilter | IirFilter:
    """Cascade two filters into a new one (state starts at zero)."""
    return make_filter(series_combine(_tf_of(first), _tf_of(second)))


def combine_parallel(
    first: LtiFilter | TransferFunction, second: LtiFilter | TransferFunction
) -> FirFilter | IirFilter:
    """Sum two filters into a new one; FIR only when both operands are FIR."""
    return make_filter(parallel_combine(_tf_of(first), _tf_of(second)))
