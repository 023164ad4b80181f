"""Spectral transform provider.

The filtering core only needs a narrow contract from a transform: an in-place
forward and inverse complex FFT of a fixed power-of-two size over parallel
real/imaginary arrays. It is used for FFT block convolution and for frequency
response evaluation. The transform itself is numpy's.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from sigfilt.errors import InvalidSpecificationError


def next_power_of_two(n: int) -> int:
    """Return the smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def is_power_of_two(n: int) -> bool:
    """Return True if n is a positive power of two."""
    return n > 0 and (n & (n - 1)) == 0


class Fft:
    """Complex FFT of a fixed power-of-two size.

    ``direct`` and ``inverse`` transform the arrays in place. ``inverse`` is
    normalized (divides by the size), so ``inverse(direct(x)) == x``.

    Example:
        fft = Fft(8)
        re = np.array([1.0, 0, 0, 0, 0, 0, 0, 0])
        im = np.zeros(8)
        fft.direct(re, im)      # re is now all ones
    """

    def __init__(self, size: int) -> None:
        """Initialize the transform.

        Args:
            size: Transform size, a power of two.

        Raises:
            InvalidSpecificationError: If size is not a power of two.
        """
        if not is_power_of_two(size):
            raise InvalidSpecificationError(
                f"FFT size must be a power of two, got {size}",
                parameter="size",
                expected="power of two",
                actual=size,
            )
        self._size = size

    @property
    def size(self) -> int:
        """Return the transform size."""
        return self._size

    def _check(self, real: NDArray[np.float64], imag: NDArray[np.float64]) -> None:
        if len(real) != self._size or len(imag) != self._size:
            raise InvalidSpecificationError(
                f"real/imag arrays must both have length {self._size}, "
                f"got {len(real)} and {len(imag)}",
                parameter="real/imag",
                expected=self._size,
                actual=(len(real), len(imag)),
            )

    def direct(self, real: NDArray[np.float64], imag: NDArray[np.float64]) -> None:
        """Forward transform, in place."""
        self._check(real, imag)
        spectrum = np.fft.fft(real + 1j * imag)
        real[:] = spectrum.real
        imag[:] = spectrum.imag

    def inverse(self, real: NDArray[np.float64], imag: NDArray[np.float64]) -> None:
        """Normalized inverse transform, in place."""
        self._check(real, imag)
        signal = np.fft.ifft(real + 1j * imag)
        real[:] = signal.real
        imag[:] = signal.imag
