"""FFT block convolution for long FIR kernels.

Both routines go through the :class:`~sigfilt.spectral.Fft` provider with a
fixed power-of-two size N >= kernel length M; each block contributes
N - M + 1 new output samples.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.config import get_settings
from sigfilt.errors import InvalidSpecificationError
from sigfilt.spectral import Fft, next_power_of_two


def default_fft_size(kernel_length: int) -> int:
    """Next power of two >= block_fft_factor * kernel_length."""
    return next_power_of_two(get_settings().block_fft_factor * kernel_length)


class _KernelSpectrum:
    """Kernel transformed once for a given FFT size."""

    def __init__(self, kernel: NDArray[np.float64], fft_size: Optional[int]) -> None:
        fft_size = fft_size or default_fft_size(len(kernel))
        if fft_size < len(kernel):
            raise InvalidSpecificationError(
                f"fft_size ({fft_size}) must be >= kernel length ({len(kernel)})",
                parameter="fft_size",
                expected=f">= {len(kernel)}",
                actual=fft_size,
            )
        self.fft = Fft(fft_size)
        self.re = np.zeros(fft_size)
        self.im = np.zeros(fft_size)
        self.re[: len(kernel)] = kernel
        self.fft.direct(self.re, self.im)

    def circular_convolve(self, block: NDArray[np.float64]) -> NDArray[np.float64]:
        """Circular convolution of a zero-padded block with the kernel."""
        size = self.fft.size
        re = np.zeros(size)
        im = np.zeros(size)
        re[: len(block)] = block
        self.fft.direct(re, im)
        re, im = re * self.re - im * self.im, re * self.im + im * self.re
        self.fft.inverse(re, im)
        return re


def overlap_add(
    samples: ArrayLike, kernel: ArrayLike, fft_size: Optional[int] = None
) -> NDArray[np.float64]:
    """Full linear convolution (len(x) + M - 1 samples) by overlap-add."""
    x = np.asarray(samples, dtype=np.float64).reshape(-1)
    kernel = np.asarray(kernel, dtype=np.float64).reshape(-1)
    spectrum = _KernelSpectrum(kernel, fft_size)
    size = spectrum.fft.size
    hop = size - len(kernel) + 1

    out = np.zeros(len(x) + len(kernel) - 1)
    for start in range(0, len(x), hop):
        block = spectrum.circular_convolve(x[start : start + hop])
        end = min(start + size, len(out))
        out[start:end] += block[: end - start]
    return out


class BlockConvolver:
    """Streaming FIR convolution by overlap-save.

    Chunks of any size can be fed; the last M - 1 inputs are carried
    between calls, so the concatenated outputs equal sample-by-sample FIR
    filtering of the concatenated inputs.

    Example:
        conv = BlockConvolver(kernel)
        y1 = conv.process_chunk(x[:1000])
        y2 = conv.process_chunk(x[1000:])
    """

    def __init__(self, kernel: ArrayLike, fft_size: Optional[int] = None) -> None:
        """Initialize the convolver.

        Args:
            kernel: FIR kernel.
            fft_size: FFT size (power of two >= kernel length); defaults to
                the next power of two >= block_fft_factor * kernel length.

        Raises:
            InvalidSpecificationError: If the kernel is empty or fft_size invalid.
        """
        self._kernel = np.asarray(kernel, dtype=np.float64).reshape(-1)
        if len(self._kernel) == 0:
            raise InvalidSpecificationError("kernel must not be empty", parameter="kernel")
        self._spectrum = _KernelSpectrum(self._kernel, fft_size)
        self._history = np.zeros(len(self._kernel) - 1)

    @property
    def kernel_length(self) -> int:
        """Number of kernel taps."""
        return len(self._kernel)

    @property
    def fft_size(self) -> int:
        """FFT size used per block."""
        return self._spectrum.fft.size

    @property
    def hop_size(self) -> int:
        """New output samples produced per FFT block."""
        return self.fft_size - len(self._kernel) + 1

    def process_chunk(self, chunk: ArrayLike) -> NDArray[np.float64]:
        """Filter a chunk; returns len(chunk) output samples."""
        x = np.asarray(chunk, dtype=np.float64).reshape(-1)
        overlap = len(self._kernel) - 1
        buffer = np.concatenate([self._history, x])
        out = np.empty(len(x))

        pos = 0
        hop = self.hop_size
        while pos < len(x):
            n = min(hop, len(x) - pos)
            block = self._spectrum.circular_convolve(buffer[pos : pos + overlap + n])
            out[pos : pos + n] = block[overlap : overlap + n]
            pos += n

        if overlap:
            self._history = buffer[-overlap:].copy()
        return out

    def reset(self) -> None:
        """Forget the carried input history."""
        self._history.fill(0.0)
