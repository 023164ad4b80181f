"""IIR filtering in direct form I."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.config import get_settings
from sigfilt.errors import OrderMismatchError
from sigfilt.processing.base import FilteringMethod, LtiFilter, as_transfer_function
from sigfilt.processing.block import overlap_add
from sigfilt.processing.delay_line import DelayLine
from sigfilt.transfer_function import TransferFunction, direct_form

logger = logging.getLogger(__name__)


class IirFilter(LtiFilter):
    """Recursive filter keeping the last inputs and outputs.

    y[n] = sum(b[k] * x[n-k]) - sum(a[m] * y[n-m]), with a[0] normalized to 1.

    ``apply_to`` is offline and stateless and returns len(x) samples. The
    block methods convolve with the impulse response truncated to
    ``impulse_response_length`` samples, which is exact only for filters
    whose response has decayed by then.

    Example:
        iir = IirFilter([1, 0.4], [1, -0.6, 0.2])
        iir.process_batch([1, 0, 0, 0])     # [1.0, 1.0, 0.4, 0.04]
    """

    def __init__(
        self, numerator: TransferFunction | ArrayLike, denominator: Optional[ArrayLike] = None
    ) -> None:
        """Initialize the filter.

        Args:
            numerator: Numerator coefficients, or a TransferFunction.
            denominator: Denominator coefficients when raw numerator is given.

        Raises:
            InvalidCoefficientError: If denominator[0] is zero or coefficients
                are empty or non-finite.
        """
        super().__init__(as_transfer_function(numerator, denominator))
        self._b = self._tf.numerator.astype(np.float32)
        self._a = self._tf.denominator.astype(np.float32)
        self._inputs = DelayLine(len(self._b))
        self._outputs = DelayLine(max(len(self._a) - 1, 1))

    @property
    def numerator(self) -> NDArray[np.float32]:
        """Copy of the working numerator."""
        return self._b.copy()

    @property
    def denominator(self) -> NDArray[np.float32]:
        """Copy of the working denominator."""
        return self._a.copy()

    def process(self, sample: float) -> float:
        self._inputs.push(sample)
        output = np.dot(self._b, self._inputs.window)
        if len(self._a) > 1:
            output -= np.dot(self._a[1:], self._outputs.window)
        self._outputs.push(output)
        return float(output)

    def reset(self) -> None:
        self._inputs.reset()
        self._outputs.reset()

    def change(self, tf: TransferFunction) -> None:
        """Replace the coefficients in place; the input/output history is kept.

        Raises:
            InvalidCoefficientError: If the new denominator[0] is zero.
            OrderMismatchError: If numerator or denominator length differs.
        """
        tf = tf.normalized()
        if len(tf.numerator) != len(self._b):
            raise OrderMismatchError("numerator", len(self._b), len(tf.numerator))
        if len(tf.denominator) != len(self._a):
            raise OrderMismatchError("denominator", len(self._a), len(tf.denominator))
        self._b[:] = tf.numerator
        self._a[:] = tf.denominator
        self._tf = tf
        logger.debug("IIR coefficients changed (order %d)", tf.order)

    def impulse_response(self, length: Optional[int] = None) -> NDArray[np.float32]:
        """Impulse response of the working (float32) coefficients."""
        length = length or get_settings().impulse_response_length
        impulse = np.zeros(length, dtype=np.float32)
        impulse[0] = 1.0
        return direct_form(self._b, self._a, impulse, np.float32)

    def _apply(self, x: NDArray[np.float32], method: FilteringMethod) -> NDArray[np.float32]:
        if method is FilteringMethod.CUSTOM:
            return self.process_batch(x)
        if method in (FilteringMethod.OVERLAP_ADD, FilteringMethod.OVERLAP_SAVE):
            kernel = self.impulse_response()
            return overlap_add(x, kernel)[: len(x)].astype(np.float32)
        return direct_form(self._b, self._a, x, np.float32)
