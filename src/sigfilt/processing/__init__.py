"""Runtime filters: FIR, IIR, transposed-state, BiQuad, one-pole, chains."""

from sigfilt.processing.base import FilteringMethod, LtiFilter, OnlineFilter
from sigfilt.processing.biquad import (
    BiQuadCoefficients,
    BiQuadFilter,
    BiQuadKind,
    cookbook_coefficients,
)
from sigfilt.processing.block import BlockConvolver, overlap_add
from sigfilt.processing.chain import FilterChain
from sigfilt.processing.combine import combine_parallel, combine_series, make_filter
from sigfilt.processing.delay_line import DelayLine
from sigfilt.processing.fir import FirFilter
from sigfilt.processing.iir import IirFilter
from sigfilt.processing.one_pole import OnePoleFilter, OnePoleKind, one_pole_coefficients
from sigfilt.processing.simple import (
    comb_feedback,
    comb_feedforward,
    dc_removal,
    de_emphasis,
    estimate_gain,
    moving_average,
    pre_emphasis,
)
from sigfilt.processing.zi import ZiFilter

__all__ = [
    "BiQuadCoefficients",
    "BiQuadFilter",
    "BiQuadKind",
    "BlockConvolver",
    "DelayLine",
    "FilterChain",
    "FilteringMethod",
    "FirFilter",
    "IirFilter",
    "LtiFilter",
    "OnePoleFilter",
    "OnePoleKind",
    "OnlineFilter",
    "ZiFilter",
    "comb_feedback",
    "comb_feedforward",
    "combine_parallel",
    "combine_series",
    "cookbook_coefficients",
    "dc_removal",
    "de_emphasis",
    "estimate_gain",
    "make_filter",
    "moving_average",
    "one_pole_coefficients",
    "overlap_add",
    "pre_emphasis",
]
