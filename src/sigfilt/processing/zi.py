"""Transposed-state ("Zi") filtering.

The state vector has one slot per coefficient of the longer polynomial:

    y = b[0]*x + zi[0]
    zi[i] = b[i+1]*x - a[i+1]*y + zi[i+1]

This form carries no raw input/output history, so coefficients can be
replaced mid-stream without the discontinuities a direct-form history would
produce. It is the form designed filters use for online retuning.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt import polynomials
from sigfilt.config import get_settings
from sigfilt.errors import (
    InvalidCoefficientError,
    InvalidSpecificationError,
    OrderMismatchError,
)
from sigfilt.models import DiscreteSignal
from sigfilt.processing.base import FilteringMethod, LtiFilter, as_samples, as_transfer_function
from sigfilt.transfer_function import TransferFunction

logger = logging.getLogger(__name__)


class ZiFilter(LtiFilter):
    """Transposed direct form II filter with online coefficient changes.

    ``apply_to`` runs online: it uses and updates the live state.

    Example:
        zi = ZiFilter([0.2, 0.2], [1, -0.6])
        zi.init_state(zi.tf.steady_state() * 3.0)   # start settled at 3.0
        zi.process(3.0)                             # 3.0
    """

    def __init__(
        self, numerator: TransferFunction | ArrayLike, denominator: Optional[ArrayLike] = None
    ) -> None:
        """Initialize the filter with zero state.

        Args:
            numerator: Numerator coefficients, or a TransferFunction.
            denominator: Denominator coefficients when raw numerator is given.

        Raises:
            InvalidCoefficientError: If denominator[0] is zero or coefficients
                are empty or non-finite.
        """
        super().__init__(as_transfer_function(numerator, denominator))
        self._nb = len(self._tf.numerator)
        self._na = len(self._tf.denominator)
        size = max(self._nb, self._na)

        self._b = np.zeros(size, dtype=np.float32)
        self._a = np.zeros(size, dtype=np.float32)
        self._b[: self._nb] = self._tf.numerator
        self._a[: self._na] = self._tf.denominator
        self._zi = np.zeros(size, dtype=np.float32)

    @property
    def state(self) -> NDArray[np.float32]:
        """Copy of the state vector (last slot always zero)."""
        return self._zi.copy()

    def init_state(self, zi: ArrayLike) -> None:
        """Set the state vector.

        Args:
            zi: len(state) - 1 values (as from ``TransferFunction.steady_state``)
                or len(state) values.

        Raises:
            InvalidSpecificationError: If the length fits neither form.
        """
        values = np.asarray(zi, dtype=np.float32).reshape(-1)
        size = len(self._zi)
        if len(values) not in (size - 1, size):
            raise InvalidSpecificationError(
                f"state must have {size - 1} or {size} values, got {len(values)}",
                parameter="zi",
                expected=size - 1,
                actual=len(values),
            )
        self._zi.fill(0.0)
        self._zi[: len(values)] = values

    def process(self, sample: float) -> float:
        zi = self._zi
        output = self._b[0] * sample + zi[0]
        zi[:-1] = self._b[1:] * sample - self._a[1:] * output + zi[1:]
        return float(output)

    def process_batch(self, samples: ArrayLike) -> NDArray[np.float32]:
        x = as_samples(samples)
        out = np.empty(len(x), dtype=np.float32)

        b0 = self._b[0]
        b = self._b[1:]
        a = self._a[1:]
        zi = self._zi

        for i, sample in enumerate(x):
            output = b0 * sample + zi[0]
            zi[:-1] = b * sample - a * output + zi[1:]
            out[i] = output

        return out

    def reset(self) -> None:
        self._zi.fill(0.0)

    def change(self, tf: TransferFunction) -> None:
        """Replace both polynomials in place; the state is kept.

        Raises:
            InvalidCoefficientError: If the new denominator[0] is zero.
            OrderMismatchError: If numerator or denominator length differs.
        """
        tf = tf.normalized()
        self._check_length("numerator", self._nb, tf.numerator)
        self._check_length("denominator", self._na, tf.denominator)
        self._b[: self._nb] = tf.numerator
        self._a[: self._na] = tf.denominator
        self._tf = tf
        logger.debug("Zi coefficients changed (order %d)", tf.order)

    def change_numerator(self, numerator: ArrayLike) -> None:
        """Replace the numerator only; the state is kept.

        Raises:
            OrderMismatchError: If the length differs.
        """
        b = np.asarray(numerator, dtype=np.float64).reshape(-1)
        self._check_length("numerator", self._nb, b)
        self._b[: self._nb] = b
        self._tf = TransferFunction(b, self._a[: self._na])

    def change_denominator(self, denominator: ArrayLike) -> None:
        """Replace the denominator only; the state is kept.

        A denominator with a[0] != 1 is normalized, scaling the numerator by
        the same factor so the system stays B/A.

        Raises:
            InvalidCoefficientError: If denominator[0] is zero.
            OrderMismatchError: If the length differs.
        """
        a = np.asarray(denominator, dtype=np.float64).reshape(-1)
        self._check_length("denominator", self._na, a)
        a0 = a[0]
        if abs(a0) < polynomials.ZERO_TOLERANCE:
            raise InvalidCoefficientError(
                "denominator[0] cannot be zero", parameter="denominator[0]", actual=a0
            )
        self._a[: self._na] = a / a0
        self._b[: self._nb] /= a0
        self._tf = TransferFunction(self._b[: self._nb], self._a[: self._na])

    @staticmethod
    def _check_length(what: str, expected: int, values: NDArray) -> None:
        if len(values) != expected:
            raise OrderMismatchError(what, expected, len(values))

    def zero_phase(self, signal: DiscreteSignal, pad_length: int = 0) -> DiscreteSignal:
        """Forward-backward filtering with zero phase distortion.

        The signal is extended at both ends by odd reflection, filtered
        forward and then backward from steady-state initial conditions, and
        trimmed back to its original length. The live state is not touched.

        Args:
            signal: Input signal.
            pad_length: Edge extension; 0 means ``zero_phase_pad_factor``
                times (len(state) - 1).

        Raises:
            InvalidSpecificationError: If pad_length >= len(signal).
        """
        x = signal.samples.astype(np.float64)
        if pad_length <= 0:
            pad_length = get_settings().zero_phase_pad_factor * (len(self._zi) - 1)
        if pad_length >= len(x):
            raise InvalidSpecificationError(
                f"pad_length ({pad_length}) must be less than the signal length ({len(x)})",
                parameter="pad_length",
                expected=f"< {len(x)}",
                actual=pad_length,
            )

        if pad_length:
            head = 2 * x[0] - x[pad_length:0:-1]
            tail = 2 * x[-1] - x[-2 : -pad_length - 2 : -1]
            extended = np.concatenate([head, x, tail])
        else:
            extended = x

        steady = TransferFunction(self._b[: self._nb], self._a[: self._na]).steady_state()
        runner = ZiFilter(self._tf)

        runner.init_state(steady * extended[0])
        forward = runner.process_batch(extended)

        runner.init_state(steady * forward[-1])
        backward = runner.process_batch(forward[::-1])[::-1]

        if pad_length:
            backward = backward[pad_length:-pad_length]
        return DiscreteSignal(signal.sampling_rate, backward)

    def _apply(self, x: NDArray[np.float32], method: FilteringMethod) -> NDArray[np.float32]:
        return self.process_batch(x)
