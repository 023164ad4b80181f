"""Adaptive filters: LMS family and RLS."""

from sigfilt.adaptive.base import AdaptiveFilter
from sigfilt.adaptive.rules import (
    LmfRule,
    LmsRule,
    NlmfRule,
    NlmsRule,
    RlsRule,
    SignLmsRule,
    UpdateRule,
    VariableStepLmsRule,
)

__all__ = [
    "AdaptiveFilter",
    "LmfRule",
    "LmsRule",
    "NlmfRule",
    "NlmsRule",
    "RlsRule",
    "SignLmsRule",
    "UpdateRule",
    "VariableStepLmsRule",
]
