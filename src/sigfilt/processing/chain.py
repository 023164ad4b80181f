"""Cascade of online filters."""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.errors import InvalidSpecificationError
from sigfilt.models import DiscreteSignal
from sigfilt.processing.base import OnlineFilter, as_samples
from sigfilt.processing.iir import IirFilter
from sigfilt.transfer_function import TransferFunction, combine_sections


class FilterChain:
    """Ordered cascade of filters that can be switched off as a whole.

    While disabled, samples pass through unchanged and stage states are
    left as they are; re-enabling resets every stage so stale state does
    not leak into the output.

    Example:
        chain = FilterChain([dc_removal(), moving_average(5)])

        for sample in samples:
            output = chain.process(sample)

        # Bypass the whole chain
        chain.enabled = False
        chain.process(1.0)      # 1.0
    """

    def __init__(self, filters: Iterable[OnlineFilter] = (), enabled: bool = True) -> None:
        self._filters: list[OnlineFilter] = list(filters)
        self._enabled = enabled

    @classmethod
    def from_sos(cls, sections: Sequence[TransferFunction]) -> FilterChain:
        """One IIR stage per second-order section, in order."""
        return cls(IirFilter(section) for section in sections)

    @property
    def enabled(self) -> bool:
        """Return whether the chain filters."""
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        """Enable or disable filtering."""
        if value and not self._enabled:
            self.reset()
        self._enabled = value

    @property
    def tf(self) -> TransferFunction:
        """Overall transfer function of the cascade.

        Raises:
            InvalidSpecificationError: If the chain is empty or a stage has
                no transfer function.
        """
        tfs = []
        for stage in self._filters:
            tf = getattr(stage, "tf", None)
            if not isinstance(tf, TransferFunction):
                raise InvalidSpecificationError(
                    f"{type(stage).__name__} has no transfer function", parameter="filters"
                )
            tfs.append(tf)
        return combine_sections(tfs)

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[OnlineFilter]:
        return iter(self._filters)

    def __getitem__(self, index: int) -> OnlineFilter:
        return self._filters[index]

    def add(self, stage: OnlineFilter) -> None:
        """Append a stage at the end."""
        self._filters.append(stage)

    def insert(self, index: int, stage: OnlineFilter) -> None:
        """Insert a stage before ``index``."""
        self._filters.insert(index, stage)

    def remove_at(self, index: int) -> OnlineFilter:
        """Remove and return the stage at ``index``."""
        return self._filters.pop(index)

    def process(self, sample: float) -> float:
        if not self._enabled:
            return float(sample)
        for stage in self._filters:
            sample = stage.process(sample)
        return float(sample)

    def process_batch(self, samples: ArrayLike) -> NDArray[np.float32]:
        """Run a block through every stage in turn."""
        x = as_samples(samples).copy()
        if not self._enabled:
            return x
        for stage in self._filters:
            batch = getattr(stage, "process_batch", None)
            if batch is not None:
                x = np.asarray(batch(x), dtype=np.float32)
            else:
                x = np.array([stage.process(s) for s in x], dtype=np.float32)
        return x

    def apply_to(self, signal: DiscreteSignal) -> DiscreteSignal:
        """Filter a whole signal online through the chain."""
        return DiscreteSignal(signal.sampling_rate, self.process_batch(signal.samples))

    def reset(self) -> None:
        for stage in self._filters:
            stage.reset()
