"""One-pole filters: y[n] = b0*x[n] - a1*y[n-1]."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.errors import InvalidSpecificationError, ensure_normalized_frequency
from sigfilt.processing.base import FilteringMethod, LtiFilter, as_samples
from sigfilt.transfer_function import TransferFunction

logger = logging.getLogger(__name__)


class OnePoleKind(Enum):
    LOWPASS = "lowpass"
    HIGHPASS = "highpass"


def one_pole_coefficients(kind: OnePoleKind, freq: float) -> tuple[float, float]:
    """Return (b0, a1) for a one-pole filter with unit peak gain.

    Low-pass places the pole at exp(-2*pi*f) (unit gain at DC); high-pass at
    -exp(-2*pi*(0.5 - f)) (unit gain at Nyquist).
    """
    ensure_normalized_frequency(freq)
    if kind is OnePoleKind.LOWPASS:
        a1 = -math.exp(-2 * math.pi * freq)
        return 1 + a1, a1
    a1 = math.exp(-2 * math.pi * (0.5 - freq))
    return 1 - a1, a1


class OnePoleFilter(LtiFilter):
    """Single-pole recursive filter with one state scalar."""

    def __init__(self, b0: float, a1: float) -> None:
        super().__init__(TransferFunction([b0], [1.0, a1]))
        self._kind: Optional[OnePoleKind] = None
        self._b0 = np.float32(b0)
        self._a1 = np.float32(a1)
        self._prev = np.float32(0.0)

    @classmethod
    def design(cls, kind: OnePoleKind, freq: float) -> OnePoleFilter:
        """Build a low-pass or high-pass filter with cutoff ``freq``."""
        one_pole = cls(*one_pole_coefficients(kind, freq))
        one_pole._kind = kind
        return one_pole

    @property
    def kind(self) -> Optional[OnePoleKind]:
        return self._kind

    def process(self, sample: float) -> float:
        self._prev = self._b0 * np.float32(sample) - self._a1 * self._prev
        return float(self._prev)

    def process_batch(self, samples: ArrayLike) -> NDArray[np.float32]:
        x = as_samples(samples)
        out = np.empty(len(x), dtype=np.float32)
        b0, a1, prev = self._b0, self._a1, self._prev
        for i, sample in enumerate(x):
            prev = b0 * sample - a1 * prev
            out[i] = prev
        self._prev = prev
        return out

    def reset(self) -> None:
        self._prev = np.float32(0.0)

    def change(self, b0: float, a1: float) -> None:
        """Replace the coefficients; the state is kept."""
        self._b0 = np.float32(b0)
        self._a1 = np.float32(a1)
        self._tf = TransferFunction([b0], [1.0, a1])

    def retune(self, freq: float) -> None:
        """Move the cutoff of a designed filter; the state is kept.

        Raises:
            InvalidSpecificationError: If the filter was not built by :meth:`design`.
        """
        if self._kind is None:
            raise InvalidSpecificationError(
                "retune needs a filter built with OnePoleFilter.design", parameter="kind"
            )
        self.change(*one_pole_coefficients(self._kind, freq))
        logger.debug("One-pole %s retuned to %g", self._kind.value, freq)

    def _apply(self, x: NDArray[np.float32], method: FilteringMethod) -> NDArray[np.float32]:
        if method is FilteringMethod.CUSTOM:
            return self.process_batch(x)
        runner = OnePoleFilter(float(self._b0), float(self._a1))
        return runner.process_batch(x)
