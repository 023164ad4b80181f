"""FIR filtering: direct-form streaming plus offline block convolution."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.config import get_settings
from sigfilt.errors import InvalidSpecificationError, OrderMismatchError
from sigfilt.processing.base import FilteringMethod, LtiFilter, as_samples, as_transfer_function
from sigfilt.processing.block import BlockConvolver, overlap_add
from sigfilt.processing.delay_line import DelayLine
from sigfilt.transfer_function import TransferFunction

__all__ = ["FilteringMethod", "FirFilter"]

logger = logging.getLogger(__name__)


class FirFilter(LtiFilter):
    """Finite impulse response filter.

    Streaming keeps the last len(kernel) inputs in a :class:`DelayLine`.
    ``apply_to`` is offline and stateless: it returns the full convolution
    (len(x) + len(kernel) - 1 samples), computed directly for short kernels
    and by FFT block convolution for kernels of ``fir_fft_threshold`` taps
    or more. Both paths agree up to float32 rounding.

    Example:
        fir = FirFilter([0.25, 0.5, 0.25])
        y = fir.process(1.0)          # 0.25
        smoothed = fir.apply_to(signal)
    """

    def __init__(self, kernel: TransferFunction | ArrayLike) -> None:
        """Initialize the filter.

        Args:
            kernel: FIR kernel, or a TransferFunction with a constant denominator.

        Raises:
            InvalidSpecificationError: If a recursive transfer function is given.
            InvalidCoefficientError: If the kernel is empty or non-finite.
        """
        tf = as_transfer_function(kernel)
        if not tf.is_fir:
            raise InvalidSpecificationError(
                "FirFilter needs a constant denominator; use IirFilter for recursive systems",
                parameter="denominator",
                expected=1,
                actual=len(tf.denominator),
            )
        super().__init__(tf)
        self._kernel = self._tf.numerator.astype(np.float32)
        self._delay_line = DelayLine(len(self._kernel))

    @property
    def kernel(self) -> NDArray[np.float32]:
        """Copy of the working kernel."""
        return self._kernel.copy()

    def process(self, sample: float) -> float:
        self._delay_line.push(sample)
        return float(np.dot(self._kernel, self._delay_line.window))

    def process_batch(self, samples: ArrayLike) -> NDArray[np.float32]:
        """Filter a block online; state is carried across calls."""
        x = as_samples(samples)
        if len(x) == 0:
            return np.zeros(0, dtype=np.float32)
        history = self._delay_line.window[: len(self._kernel) - 1][::-1]
        out = np.convolve(np.concatenate([history, x]), self._kernel, mode="valid")
        self._delay_line.extend(x)
        return out.astype(np.float32)

    def change(self, kernel: TransferFunction | ArrayLike) -> None:
        """Replace the kernel in place; the delay line is kept.

        Raises:
            OrderMismatchError: If the new kernel has a different length.
        """
        tf = as_transfer_function(kernel).normalized()
        if not tf.is_fir or len(tf.numerator) != len(self._kernel):
            raise OrderMismatchError("kernel", len(self._kernel), len(tf.numerator))
        self._kernel[:] = tf.numerator
        self._tf = tf
        logger.debug("FIR kernel changed (%d taps)", len(self._kernel))

    def reset(self) -> None:
        self._delay_line.reset()

    def _apply(self, x: NDArray[np.float32], method: FilteringMethod) -> NDArray[np.float32]:
        if method is FilteringMethod.CUSTOM:
            return self.process_batch(x)

        if method is FilteringMethod.AUTO:
            threshold = get_settings().fir_fft_threshold
            method = FilteringMethod.DIRECT if len(self._kernel) < threshold else FilteringMethod.OVERLAP_SAVE
        logger.debug("FIR apply_to: %s path, %d taps", method.value, len(self._kernel))

        if method is FilteringMethod.DIRECT:
            return np.convolve(x, self._kernel).astype(np.float32)
        if method is FilteringMethod.OVERLAP_ADD:
            return overlap_add(x, self._kernel).astype(np.float32)
        return self._overlap_save(x)

    def _overlap_save(self, x: NDArray[np.float32], fft_size: Optional[int] = None) -> NDArray[np.float32]:
        convolver = BlockConvolver(self._kernel, fft_size)
        tail = np.zeros(len(self._kernel) - 1)
        return convolver.process_chunk(np.concatenate([x, tail])).astype(np.float32)
