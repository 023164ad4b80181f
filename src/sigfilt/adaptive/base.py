"""Adaptive FIR filter composed of a delay line and an update rule."""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.adaptive.rules import UpdateRule
from sigfilt.errors import (
    InvalidSpecificationError,
    OrderMismatchError,
    RateMismatchError,
    ensure_positive,
)
from sigfilt.models import DiscreteSignal
from sigfilt.processing.delay_line import DelayLine


class AdaptiveFilter:
    """FIR filter whose weights are updated every sample.

    The output is computed from the current weights before they are
    updated. Runs in float64 because the weights are rewritten per sample.

    Example:
        lms = AdaptiveFilter(order=8, rule=NlmsRule(mu=0.5))
        for x, d in zip(inputs, desired):
            y = lms.process(x, d)
        lms.weights     # identified system
    """

    def __init__(self, order: int, rule: UpdateRule, weights: Optional[ArrayLike] = None) -> None:
        """Initialize the filter.

        Args:
            order: Number of taps.
            rule: Update rule; it is bound to this filter and must not be shared.
            weights: Initial weights (zeros if None).

        Raises:
            InvalidSpecificationError: If order is not positive or the rule
                cannot be bound to it.
            OrderMismatchError: If weights has a length other than order.
        """
        ensure_positive(order, "order")
        if weights is None:
            initial = np.zeros(order)
        else:
            initial = np.asarray(weights, dtype=np.float64).reshape(-1).copy()
            if len(initial) != order:
                raise OrderMismatchError("weights", order, len(initial))

        self._order = order
        self._initial_weights = initial
        self._weights = initial.copy()
        self._delay_line = DelayLine(order, dtype=np.float64)
        self._rule = rule
        self._rule.bind(order)

    @classmethod
    def with_random_weights(
        cls, order: int, rule: UpdateRule, seed: Optional[int] = None
    ) -> AdaptiveFilter:
        """Start from weights drawn as 1 + U[0, 1) from a seeded generator."""
        rng = np.random.default_rng(seed)
        return cls(order, rule, 1.0 + rng.random(order))

    @property
    def order(self) -> int:
        """Number of taps."""
        return self._order

    @property
    def rule(self) -> UpdateRule:
        """The update rule."""
        return self._rule

    @property
    def weights(self) -> NDArray[np.float64]:
        """Copy of the current weights."""
        return self._weights.copy()

    def predict(self, sample: float) -> float:
        """Filter one sample with the current weights, without adapting."""
        self._delay_line.push(sample)
        return float(np.dot(self._weights, self._delay_line.window))

    def process(self, sample: float, desired: float) -> float:
        """Filter one sample, then adapt toward ``desired``.

        Returns:
            Output computed before the weight update.
        """
        output = self.predict(sample)
        self._rule.update(self._weights, self._delay_line.window, desired - output)
        return output

    def process_batch(self, samples: ArrayLike, desired: ArrayLike) -> NDArray[np.float64]:
        """Run :meth:`process` over paired blocks.

        Raises:
            InvalidSpecificationError: If the blocks differ in length.
        """
        x = np.asarray(samples, dtype=np.float64).reshape(-1)
        d = np.asarray(desired, dtype=np.float64).reshape(-1)
        if len(x) != len(d):
            raise InvalidSpecificationError(
                f"input and desired lengths differ: {len(x)} vs {len(d)}",
                parameter="desired",
                expected=len(x),
                actual=len(d),
            )
        out = np.empty(len(x))
        for i in range(len(x)):
            out[i] = self.process(x[i], d[i])
        return out

    def apply_to(self, signal: DiscreteSignal, desired: DiscreteSignal) -> DiscreteSignal:
        """Adapt over a whole signal pair and return the filter output.

        Raises:
            RateMismatchError: If the sampling rates differ.
            InvalidSpecificationError: If the lengths differ.
        """
        if signal.sampling_rate != desired.sampling_rate:
            raise RateMismatchError(signal.sampling_rate, desired.sampling_rate)
        return DiscreteSignal(signal.sampling_rate, self.process_batch(signal.samples, desired.samples))

    def reset(self) -> None:
        """Restore initial weights, zero the delay line and reset the rule."""
        self._weights[:] = self._initial_weights
        self._delay_line.reset()
        self._rule.reset()
