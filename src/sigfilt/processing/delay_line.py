"""Delay line for streaming filters.

A fixed-length circular buffer of the most recent samples. Storage is
doubled: every sample is written twice, ``length`` slots apart, so the
last ``length`` samples are always one contiguous slice and no modulo is
needed when a kernel is applied to them. Push and read are O(1).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.errors import ensure_positive


class DelayLine:
    """Circular buffer of the last ``length`` samples.

    Not thread-safe: a delay line belongs to one filter and is driven from
    one thread.

    Example:
        >>> line = DelayLine(3)
        >>> for x in (1.0, 2.0, 3.0, 4.0):
        ...     line.push(x)
        >>> line.window.tolist()
        [4.0, 3.0, 2.0]
    """

    def __init__(self, length: int, dtype: type = np.float32) -> None:
        """Initialize an all-zero delay line.

        Args:
            length: Number of samples held.
            dtype: Sample precision.

        Raises:
            InvalidSpecificationError: If length is not positive.
        """
        ensure_positive(length, "length")

        self._length = length
        self._buffer = np.zeros(2 * length, dtype=dtype)
        self._offset = 0  # Position of the newest sample
        self._total_written = 0

    @property
    def length(self) -> int:
        """Number of samples held."""
        return self._length

    @property
    def total_written(self) -> int:
        """Samples pushed since construction or the last reset."""
        return self._total_written

    @property
    def window(self) -> NDArray:
        """View of the held samples, newest first."""
        return self._buffer[self._offset : self._offset + self._length]

    def push(self, sample: float) -> None:
        """Insert a sample, dropping the oldest."""
        offset = self._offset - 1
        if offset < 0:
            offset += self._length
        self._buffer[offset] = sample
        self._buffer[offset + self._length] = sample
        self._offset = offset
        self._total_written += 1

    def extend(self, samples: ArrayLike) -> None:
        """Push samples in order; only the last ``length`` of them matter."""
        samples = np.asarray(samples).reshape(-1)
        for sample in samples[-self._length :]:
            self.push(sample)
        self._total_written += max(0, len(samples) - self._length)

    def reset(self) -> None:
        """Zero all samples."""
        self._buffer.fill(0)
        self._offset = 0
        self._total_written = 0
