"""Filter design: analog prototypes, band mapping, SOS factorization."""

from sigfilt.design.iir import (
    BandType,
    DesignedFilter,
    DesignParameters,
    FilterFamily,
    design,
    design_tf,
)
from sigfilt.design.sos import sos_to_tf, tf_to_sos
from sigfilt.design.transform import (
    bandpass_tf,
    bandstop_tf,
    bilinear_transform,
    highpass_tf,
    lowpass_tf,
)

__all__ = [
    "BandType",
    "DesignParameters",
    "DesignedFilter",
    "FilterFamily",
    "bandpass_tf",
    "bandstop_tf",
    "bilinear_transform",
    "design",
    "design_tf",
    "highpass_tf",
    "lowpass_tf",
    "sos_to_tf",
    "tf_to_sos",
]
