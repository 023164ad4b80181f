"""BiQuad (second-order IIR) filters with audio-EQ cookbook designs.

Coefficient formulas follow R. Bristow-Johnson's "Cookbook formulae for
audio EQ biquad filter coefficients". With w = 2*pi*f (f a fraction of the
sampling rate) and alpha = sin(w) / (2*q):

    low-pass    b = [(1-cos)/2, 1-cos, (1-cos)/2]   a = [1+alpha, -2cos, 1-alpha]
    high-pass   b = [(1+cos)/2, -(1+cos), (1+cos)/2] a = as low-pass
    band-pass   b = [alpha, 0, -alpha]               a = as low-pass
    notch       b = [1, -2cos, 1]                    a = as low-pass
    all-pass    b = [1-alpha, -2cos, 1+alpha]        a = reversed b

Peak and shelf filters use A = 10^(gain_db/40); for shelves q is the slope.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.errors import (
    InvalidSpecificationError,
    OrderMismatchError,
    ensure_normalized_frequency,
    ensure_positive,
)
from sigfilt.processing.base import FilteringMethod, LtiFilter, as_samples, as_transfer_function
from sigfilt.transfer_function import TransferFunction, direct_form

logger = logging.getLogger(__name__)


class BiQuadKind(Enum):
    """Cookbook filter shapes."""

    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"
    NOTCH = "notch"
    ALLPASS = "allpass"
    PEAK = "peak"
    LOWSHELF = "lowshelf"
    HIGHSHELF = "highshelf"


@dataclass(frozen=True, slots=True)
class BiQuadCoefficients:
    """Coefficients of a second-order section.

        y[n] = b0*x[n] + b1*x[n-1] + b2*x[n-2] - a1*y[n-1] - a2*y[n-2]

    Normalized so that a0 = 1.
    """

    b0: float
    b1: float
    b2: float
    a1: float
    a2: float

    @classmethod
    def from_raw(cls, b: tuple[float, float, float], a: tuple[float, float, float]) -> BiQuadCoefficients:
        """Normalize raw (b, a) triples by a[0]."""
        a0 = a[0]
        return cls(b[0] / a0, b[1] / a0, b[2] / a0, a[1] / a0, a[2] / a0)

    def to_tf(self) -> TransferFunction:
        """Transfer function with numerator and denominator of length 3."""
        return TransferFunction([self.b0, self.b1, self.b2], [1.0, self.a1, self.a2])


def cookbook_coefficients(
    kind: BiQuadKind, freq: float, q: float = 1.0, gain_db: float = 1.0
) -> BiQuadCoefficients:
    """Compute cookbook coefficients.

    Args:
        kind: Filter shape.
        freq: Centre or cutoff frequency as a fraction of the sampling rate.
        q: Quality factor (shelf slope for shelves).
        gain_db: Gain in dB for peak and shelf filters.

    Returns:
        BiQuadCoefficients normalized so that a0 = 1.

    Raises:
        InvalidSpecificationError: If freq is outside (0, 0.5) or q <= 0.
    """
    ensure_normalized_frequency(freq)
    ensure_positive(q, "q")

    w = 2 * math.pi * freq
    cos_w = math.cos(w)
    alpha = math.sin(w) / (2 * q)

    if kind is BiQuadKind.LOWPASS:
        b = ((1 - cos_w) / 2, 1 - cos_w, (1 - cos_w) / 2)
        a = (1 + alpha, -2 * cos_w, 1 - alpha)
    elif kind is BiQuadKind.HIGHPASS:
        b = ((1 + cos_w) / 2, -(1 + cos_w), (1 + cos_w) / 2)
        a = (1 + alpha, -2 * cos_w, 1 - alpha)
    elif kind is BiQuadKind.BANDPASS:
        b = (alpha, 0.0, -alpha)
        a = (1 + alpha, -2 * cos_w, 1 - alpha)
    elif kind is BiQuadKind.NOTCH:
        b = (1.0, -2 * cos_w, 1.0)
        a = (1 + alpha, -2 * cos_w, 1 - alpha)
    elif kind is BiQuadKind.ALLPASS:
        b = (1 - alpha, -2 * cos_w, 1 + alpha)
        a = (b[2], b[1], b[0])
    elif kind is BiQuadKind.PEAK:
        amp = 10 ** (gain_db / 40)
        b = (1 + alpha * amp, -2 * cos_w, 1 - alpha * amp)
        a = (1 + alpha / amp, -2 * cos_w, 1 - alpha / amp)
    else:
        amp = 10 ** (gain_db / 40)
        shelf_alpha = math.sin(w) / 2 * math.sqrt((amp + 1 / amp) * (1 / q - 1) + 2)
        root = 2 * math.sqrt(amp) * shelf_alpha
        if kind is BiQuadKind.LOWSHELF:
            b = (
                amp * (amp + 1 - (amp - 1) * cos_w + root),
                2 * amp * (amp - 1 - (amp + 1) * cos_w),
                amp * (amp + 1 - (amp - 1) * cos_w - root),
            )
            a = (
                amp + 1 + (amp - 1) * cos_w + root,
                -2 * (amp - 1 + (amp + 1) * cos_w),
                amp + 1 + (amp - 1) * cos_w - root,
            )
        else:
            b = (
                amp * (amp + 1 + (amp - 1) * cos_w + root),
                -2 * amp * (amp - 1 + (amp + 1) * cos_w),
                amp * (amp + 1 + (amp - 1) * cos_w - root),
            )
            a = (
                amp + 1 - (amp - 1) * cos_w + root,
                2 * (amp - 1 - (amp + 1) * cos_w),
                amp + 1 - (amp - 1) * cos_w - root,
            )

    return BiQuadCoefficients.from_raw(b, a)


def _to_coefficients(coefficients: BiQuadCoefficients | TransferFunction) -> BiQuadCoefficients:
    if isinstance(coefficients, BiQuadCoefficients):
        return coefficients
    tf = coefficients.normalized()
    if len(tf.numerator) > 3 or len(tf.denominator) > 3:
        raise InvalidSpecificationError(
            "a biquad holds at most 3 numerator and 3 denominator coefficients",
            parameter="tf",
            expected="<= 3",
            actual=(len(tf.numerator), len(tf.denominator)),
        )
    b = np.zeros(3)
    a = np.zeros(3)
    b[: len(tf.numerator)] = tf.numerator
    a[: len(tf.denominator)] = tf.denominator
    return BiQuadCoefficients(float(b[0]), float(b[1]), float(b[2]), float(a[1]), float(a[2]))


class BiQuadFilter(LtiFilter):
    """Second-order IIR filter with a four-scalar state.

    Example:
        eq = BiQuadFilter.design(BiQuadKind.PEAK, 0.05, q=2.0, gain_db=6.0)
        out = eq.process_batch(samples)
        eq.retune(0.06)       # state is kept
    """

    def __init__(
        self,
        numerator: BiQuadCoefficients | TransferFunction | ArrayLike,
        denominator: Optional[ArrayLike] = None,
    ) -> None:
        """Initialize the filter.

        Args:
            numerator: BiQuadCoefficients, a TransferFunction of order <= 2,
                or raw numerator coefficients.
            denominator: Raw denominator coefficients.

        Raises:
            InvalidSpecificationError: If more than 3 coefficients are given.
            InvalidCoefficientError: If denominator[0] is zero.
        """
        if isinstance(numerator, BiQuadCoefficients):
            coeffs = numerator
        else:
            coeffs = _to_coefficients(as_transfer_function(numerator, denominator))
        super().__init__(coeffs.to_tf())
        self._design: Optional[tuple[BiQuadKind, float, float, float]] = None
        self._set(coeffs)
        self._state = np.zeros(4, dtype=np.float32)  # x1, x2, y1, y2

    @classmethod
    def design(
        cls, kind: BiQuadKind, freq: float, q: float = 1.0, gain_db: float = 1.0
    ) -> BiQuadFilter:
        """Build a filter from cookbook parameters (see :func:`cookbook_coefficients`)."""
        biquad = cls(cookbook_coefficients(kind, freq, q, gain_db))
        biquad._design = (kind, freq, q, gain_db)
        return biquad

    def _set(self, coeffs: BiQuadCoefficients) -> None:
        self._coeffs = coeffs
        self._tf = coeffs.to_tf()
        self._working = np.array(
            [coeffs.b0, coeffs.b1, coeffs.b2, coeffs.a1, coeffs.a2], dtype=np.float32
        )

    @property
    def coefficients(self) -> BiQuadCoefficients:
        """Current coefficients."""
        return self._coeffs

    @property
    def kind(self) -> Optional[BiQuadKind]:
        """Design shape, or None for filters built from raw coefficients."""
        return self._design[0] if self._design else None

    def process(self, sample: float) -> float:
        b0, b1, b2, a1, a2 = self._working
        x1, x2, y1, y2 = self._state
        x = np.float32(sample)
        y = b0 * x + b1 * x1 + b2 * x2 - a1 * y1 - a2 * y2
        self._state[:] = (x, x1, y, y1)
        return float(y)

    def process_batch(self, samples: ArrayLike) -> NDArray[np.float32]:
        x = as_samples(samples)
        out = np.empty(len(x), dtype=np.float32)

        b0, b1, b2, a1, a2 = self._working
        x1, x2, y1, y2 = self._state

        for i, x0 in enumerate(x):
            y0 = b0 * x0 + b1 * x1 + b2 * x2 - a1 * y1 - a2 * y2
            x2, x1 = x1, x0
            y2, y1 = y1, y0
            out[i] = y0

        self._state[:] = (x1, x2, y1, y2)
        return out

    def reset(self) -> None:
        self._state.fill(0.0)

    def change(self, coefficients: BiQuadCoefficients | TransferFunction) -> None:
        """Replace the coefficients in place; the state is kept.

        Raises:
            OrderMismatchError: If a transfer function of another order is given.
        """
        if isinstance(coefficients, TransferFunction):
            tf = coefficients.normalized()
            if len(tf.numerator) != 3 or len(tf.denominator) != 3:
                what = "numerator" if len(tf.numerator) != 3 else "denominator"
                actual = len(tf.numerator) if what == "numerator" else len(tf.denominator)
                raise OrderMismatchError(what, 3, actual)
        self._set(_to_coefficients(coefficients))
        logger.debug("BiQuad coefficients changed")

    def retune(
        self, freq: float, q: Optional[float] = None, gain_db: Optional[float] = None
    ) -> None:
        """Recompute cookbook coefficients for new parameters; the state is kept.

        Omitted parameters keep their design-time values.

        Raises:
            InvalidSpecificationError: If the filter was not built by :meth:`design`.
        """
        if self._design is None:
            raise InvalidSpecificationError(
                "retune needs a filter built with BiQuadFilter.design", parameter="kind"
            )
        kind, _, old_q, old_gain = self._design
        q = old_q if q is None else q
        gain_db = old_gain if gain_db is None else gain_db
        self.change(cookbook_coefficients(kind, freq, q, gain_db))
        self._design = (kind, freq, q, gain_db)

    def _apply(self, x: NDArray[np.float32], method: FilteringMethod) -> NDArray[np.float32]:
        if method is FilteringMethod.CUSTOM:
            return self.process_batch(x)
        return direct_form(self._working[:3], np.concatenate([[1.0], self._working[3:]]), x, np.float32)
