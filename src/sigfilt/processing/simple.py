"""Small ready-made filters and a gain estimator."""

from __future__ import annotations

import copy

import numpy as np

from sigfilt.errors import ensure_positive
from sigfilt.processing.base import OnlineFilter
from sigfilt.processing.fir import FirFilter
from sigfilt.processing.iir import IirFilter
from sigfilt.spectral import Fft


def moving_average(size: int) -> FirFilter:
    """Boxcar FIR of ``size`` equal taps summing to 1."""
    ensure_positive(size, "size")
    return FirFilter(np.full(size, 1.0 / size))


def pre_emphasis(a: float = 0.97) -> FirFilter:
    """y[n] = x[n] - a*x[n-1]."""
    return FirFilter([1.0, -a])


def de_emphasis(a: float = 0.97) -> IirFilter:
    """Inverse of :func:`pre_emphasis`: y[n] = x[n] + a*y[n-1]."""
    return IirFilter([1.0], [1.0, -a])


def dc_removal(r: float = 0.995) -> IirFilter:
    """DC blocker with a zero at z = 1 and a pole at z = r."""
    return IirFilter([1.0, -1.0], [1.0, -r])


def comb_feedforward(m: int, b0: float = 1.0, bm: float = 0.5, normalize: bool = True) -> FirFilter:
    """y[n] = b0*x[n] + bm*x[n-m], optionally scaled by 1/(b0 + bm)."""
    ensure_positive(m, "m")
    kernel = np.zeros(m + 1)
    kernel[0] = b0
    kernel[m] = bm
    if normalize:
        kernel /= b0 + bm
    return FirFilter(kernel)


def comb_feedback(m: int, b0: float = 1.0, am: float = 0.6) -> IirFilter:
    """y[n] = b0*x[n] - am*y[n-m]."""
    ensure_positive(m, "m")
    denominator = np.zeros(m + 1)
    denominator[0] = 1.0
    denominator[m] = am
    return IirFilter([b0], denominator)


def estimate_gain(stage: OnlineFilter, fft_size: int = 512) -> float:
    """Reciprocal of the peak magnitude response, measured from an impulse.

    The impulse is run through a reset copy of ``stage``; the original is
    not touched. Multiplying the filter output by the result keeps its
    peak gain at 1.
    """
    probe = copy.deepcopy(stage)
    probe.reset()

    re = np.zeros(fft_size)
    im = np.zeros(fft_size)
    re[0] = probe.process(1.0)
    for i in range(1, fft_size):
        re[i] = probe.process(0.0)

    Fft(fft_size).direct(re, im)
    return float(1.0 / np.max(np.hypot(re, im)))
