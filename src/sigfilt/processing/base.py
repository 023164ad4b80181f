"""Shared surface of the runtime filters.

Every filter owns its state buffers and exposes the same small set of
operations: ``process`` (one sample), ``process_batch`` (a block, online,
state carried across calls), ``apply_to`` (a whole :class:`DiscreteSignal`)
and ``reset``. Filters defined by a transfer function also expose ``tf``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.models import DiscreteSignal
from sigfilt.transfer_function import TransferFunction


class FilteringMethod(Enum):
    """How ``apply_to`` filters a whole signal.

    AUTO picks DIRECT or a block method by kernel length. CUSTOM runs the
    online ``process_batch`` path and so uses (and updates) the live state.
    """

    AUTO = "auto"
    DIRECT = "direct"
    OVERLAP_ADD = "overlap_add"
    OVERLAP_SAVE = "overlap_save"
    CUSTOM = "custom"


@runtime_checkable
class OnlineFilter(Protocol):
    """Anything that turns one sample into one sample and can be reset."""

    def process(self, sample: float) -> float: ...

    def reset(self) -> None: ...


def as_transfer_function(
    coefficients: TransferFunction | ArrayLike, denominator: Optional[ArrayLike] = None
) -> TransferFunction:
    """Accept a TransferFunction or raw numerator (and optional denominator)."""
    if isinstance(coefficients, TransferFunction):
        return coefficients
    return TransferFunction(coefficients, denominator)


def as_samples(samples: ArrayLike) -> NDArray[np.float32]:
    """Coerce input samples to a 1-D float32 array."""
    return np.asarray(samples, dtype=np.float32).reshape(-1)


class LtiFilter(ABC):
    """Base for filters executing a fixed-order transfer function.

    Working coefficients are float32 copies of the normalized transfer
    function; the state is zeroed on construction.
    """

    def __init__(self, tf: TransferFunction) -> None:
        self._tf = tf.normalized()

    @property
    def tf(self) -> TransferFunction:
        """Transfer function of the current coefficients."""
        return self._tf

    @abstractmethod
    def process(self, sample: float) -> float:
        """Filter one sample, updating the state."""

    @abstractmethod
    def reset(self) -> None:
        """Zero the state; coefficients are unchanged."""

    def process_batch(self, samples: ArrayLike) -> NDArray[np.float32]:
        """Filter a block online; returns one output per input."""
        x = as_samples(samples)
        out = np.empty(len(x), dtype=np.float32)
        for i, sample in enumerate(x):
            out[i] = self.process(sample)
        return out

    def apply_to(
        self, signal: DiscreteSignal, method: FilteringMethod = FilteringMethod.AUTO
    ) -> DiscreteSignal:
        """Filter a whole signal; the sampling rate is preserved."""
        return DiscreteSignal(signal.sampling_rate, self._apply(signal.samples, method))

    def _apply(self, x: NDArray[np.float32], method: FilteringMethod) -> NDArray[np.float32]:
        return self.process_batch(x)
