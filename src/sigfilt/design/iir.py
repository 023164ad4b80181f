"""Classical IIR filter design and online retuning.

Example:
    tf = design_tf(FilterFamily.BUTTERWORTH, BandType.LOWPASS, order=4, freq=0.1)

    lp = DesignedFilter(FilterFamily.CHEBYSHEV1, BandType.BANDPASS, 3, 0.1, 0.2)
    out = lp.process_batch(samples)
    lp.retune(0.12, 0.22)       # running state is kept
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from sigfilt.design import prototypes
from sigfilt.design.transform import bandpass_tf, bandstop_tf, highpass_tf, lowpass_tf
from sigfilt.errors import InvalidSpecificationError, ensure_positive
from sigfilt.processing.zi import ZiFilter
from sigfilt.transfer_function import TransferFunction

logger = logging.getLogger(__name__)


class FilterFamily(Enum):
    """Analog prototype family."""

    BUTTERWORTH = "butterworth"
    CHEBYSHEV1 = "chebyshev1"
    CHEBYSHEV2 = "chebyshev2"
    ELLIPTIC = "elliptic"
    BESSEL = "bessel"


class BandType(Enum):
    """Target band of the digital filter."""

    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"
    BANDSTOP = "bandstop"

    @property
    def needs_two_frequencies(self) -> bool:
        return self in (BandType.BANDPASS, BandType.BANDSTOP)


@dataclass(frozen=True, slots=True)
class DesignParameters:
    """Everything :func:`design_tf` needs.

    Attributes:
        family: Prototype family.
        band: Target band.
        order: Prototype order (band-pass/band-stop results have twice this).
        freq: Cutoff, or lower band edge, as a fraction of the sampling rate.
        freq_high: Upper band edge for band-pass/band-stop.
        ripple: Chebyshev ripple in dB.
        ripple_pass: Elliptic passband ripple in dB.
        ripple_stop: Elliptic stopband attenuation in dB.
    """

    family: FilterFamily
    band: BandType
    order: int
    freq: float
    freq_high: Optional[float] = None
    ripple: float = prototypes.DEFAULT_RIPPLE
    ripple_pass: float = prototypes.DEFAULT_RIPPLE_PASS
    ripple_stop: float = prototypes.DEFAULT_RIPPLE_STOP


def prototype(
    params: DesignParameters,
) -> tuple[NDArray[np.complex128], NDArray[np.complex128]]:
    """Return (poles, zeros) of the analog prototype; all-pole families have no zeros."""
    order = params.order
    family = params.family
    no_zeros = np.zeros(0, dtype=np.complex128)

    if family is FilterFamily.BUTTERWORTH:
        return prototypes.butterworth_poles(order), no_zeros
    if family is FilterFamily.CHEBYSHEV1:
        return prototypes.chebyshev1_poles(order, params.ripple), no_zeros
    if family is FilterFamily.CHEBYSHEV2:
        return prototypes.chebyshev2_poles(order, params.ripple), prototypes.chebyshev2_zeros(order)
    if family is FilterFamily.ELLIPTIC:
        return (
            prototypes.elliptic_poles(order, params.ripple_pass, params.ripple_stop),
            prototypes.elliptic_zeros(order, params.ripple_pass, params.ripple_stop),
        )
    return prototypes.bessel_poles(order), no_zeros


def design(params: DesignParameters) -> TransferFunction:
    """Design a digital IIR transfer function from :class:`DesignParameters`.

    Raises:
        InvalidSpecificationError: If frequencies, order or ripples are invalid.
    """
    ensure_positive(params.order, "order")
    if params.band.needs_two_frequencies and params.freq_high is None:
        raise InvalidSpecificationError(
            f"{params.band.value} design needs freq_high", parameter="freq_high"
        )

    poles, zeros = prototype(params)

    if params.band is BandType.LOWPASS:
        tf = lowpass_tf(params.freq, poles, zeros)
    elif params.band is BandType.HIGHPASS:
        tf = highpass_tf(params.freq, poles, zeros)
    elif params.band is BandType.BANDPASS:
        tf = bandpass_tf(params.freq, params.freq_high, poles, zeros)
    else:
        tf = bandstop_tf(params.freq, params.freq_high, poles, zeros)

    logger.debug(
        "Designed %s %s order=%d freq=%s freq_high=%s",
        params.family.value,
        params.band.value,
        params.order,
        params.freq,
        params.freq_high,
    )
    return tf


def design_tf(
    family: FilterFamily,
    band: BandType,
    order: int,
    freq: float,
    freq_high: Optional[float] = None,
    ripple: float = prototypes.DEFAULT_RIPPLE,
    ripple_pass: float = prototypes.DEFAULT_RIPPLE_PASS,
    ripple_stop: float = prototypes.DEFAULT_RIPPLE_STOP,
) -> TransferFunction:
    """Design a digital IIR transfer function.

    Args:
        family: Prototype family.
        band: Target band.
        order: Prototype order.
        freq: Cutoff, or lower band edge, as a fraction of the sampling rate.
        freq_high: Upper band edge (band-pass/band-stop only).
        ripple: Chebyshev ripple in dB.
        ripple_pass: Elliptic passband ripple in dB.
        ripple_stop: Elliptic stopband attenuation in dB.

    Returns:
        TransferFunction with unit gain at the band's reference frequency.

    Raises:
        InvalidSpecificationError: If any parameter is out of range.
    """
    return design(
        DesignParameters(family, band, order, freq, freq_high, ripple, ripple_pass, ripple_stop)
    )


class DesignedFilter(ZiFilter):
    """Transposed-state filter that remembers its design and can be retuned.

    Retuning redesigns at the same family, band and order and swaps the
    coefficients in without touching the running state, so parameters can
    be automated without clicks.
    """

    def __init__(
        self,
        family: FilterFamily,
        band: BandType,
        order: int,
        freq: float,
        freq_high: Optional[float] = None,
        ripple: float = prototypes.DEFAULT_RIPPLE,
        ripple_pass: float = prototypes.DEFAULT_RIPPLE_PASS,
        ripple_stop: float = prototypes.DEFAULT_RIPPLE_STOP,
    ) -> None:
        self._params = DesignParameters(
            family, band, order, freq, freq_high, ripple, ripple_pass, ripple_stop
        )
        super().__init__(design(self._params))

    @property
    def parameters(self) -> DesignParameters:
        """Current design parameters."""
        return self._params

    def retune(
        self,
        freq: float,
        freq_high: Optional[float] = None,
        ripple: Optional[float] = None,
        ripple_pass: Optional[float] = None,
        ripple_stop: Optional[float] = None,
    ) -> None:
        """Redesign for new frequencies/ripples and change coefficients online.

        Omitted ripples keep their current values; ``freq_high`` keeps its
        value too when omitted.

        Raises:
            InvalidSpecificationError: If the new parameters are invalid.
        """
        params = replace(
            self._params,
            freq=freq,
            freq_high=self._params.freq_high if freq_high is None else freq_high,
            ripple=self._params.ripple if ripple is None else ripple,
            ripple_pass=self._params.ripple_pass if ripple_pass is None else ripple_pass,
            ripple_stop=self._params.ripple_stop if ripple_stop is None else ripple_stop,
        )
        self.change(design(params))
        self._params = params
