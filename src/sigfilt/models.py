"""Core data models for sampled signals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from sigfilt.errors import InvalidSpecificationError, RateMismatchError


@dataclass(frozen=True, slots=True, eq=False)
class DiscreteSignal:
    """An ordered sequence of real samples tagged with a sampling rate.

    Samples are stored as a float32 array, the precision of the execution
    path. The array is owned by the signal; constructors copy their input.

    Attributes:
        sampling_rate: Sampling rate in Hz. Must be positive.
        samples: Sample values.
    """

    sampling_rate: int
    samples: NDArray[np.float32]

    def __post_init__(self) -> None:
        if self.sampling_rate <= 0:
            raise InvalidSpecificationError(
                f"sampling_rate must be positive, got {self.sampling_rate}",
                parameter="sampling_rate",
                expected="> 0",
                actual=self.sampling_rate,
            )
        samples = np.array(self.samples, dtype=np.float32).reshape(-1)
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_samples(cls, sampling_rate: int, samples: Iterable[float]) -> DiscreteSignal:
        """Build a signal from any iterable of numbers."""
        return cls(sampling_rate, np.fromiter(samples, dtype=np.float32))

    @classmethod
    def unit(cls, length: int, sampling_rate: int = 1) -> DiscreteSignal:
        """Return a unit impulse of the given length."""
        if length <= 0:
            raise InvalidSpecificationError(
                f"length must be positive, got {length}", parameter="length", actual=length
            )
        samples = np.zeros(length, dtype=np.float32)
        samples[0] = 1.0
        return cls(sampling_rate, samples)

    def __len__(self) -> int:
        return len(self.samples)

    def __getitem__(self, index: int) -> float:
        return float(self.samples[index])

    @property
    def duration(self) -> float:
        """Signal duration in seconds."""
        return len(self.samples) / self.sampling_rate

    def copy(self) -> DiscreteSignal:
        """Return a deep copy of this signal."""
        return DiscreteSignal(self.sampling_rate, self.samples.copy())

    def _check_rate(self, other: DiscreteSignal) -> None:
        if other.sampling_rate != self.sampling_rate:
            raise RateMismatchError(self.sampling_rate, other.sampling_rate)

    def superimpose(self, other: DiscreteSignal) -> DiscreteSignal:
        """Sum two signals sample-wise; the shorter one is zero-extended.

        Raises:
            RateMismatchError: If the sampling rates differ.
        """
        self._check_rate(other)
        length = max(len(self), len(other))
        out = np.zeros(length, dtype=np.float32)
        out[: len(self)] += self.samples
        out[: len(other)] += other.samples
        return DiscreteSignal(self.sampling_rate, out)

    def concatenate(self, other: DiscreteSignal) -> DiscreteSignal:
        """Append another signal to this one.

        Raises:
            RateMismatchError: If the sampling rates differ.
        """
        self._check_rate(other)
        return DiscreteSignal(self.sampling_rate, np.concatenate([self.samples, other.samples]))
