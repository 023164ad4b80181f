"""Coefficient update rules for adaptive FIR filters.

A rule mutates the weight vector in place from the current input window
(newest sample first) and the error e = desired - output. Every rule
supports leakage: w <- (1 - leakage*mu)*w + update.

    LMS             mu * e * x
    Sign-LMS        mu * sign(e) * sign(x)
    NLMS            mu * e * x / (eps + sum(x^2))
    LMF             4 * mu * e^3 * x
    NLMF            4 * mu * e^3 * x / (eps + sum(x^2))
    Variable-step   mu[i] * e * x[i]
    RLS             g * e, with g from the inverse correlation matrix P

The LMS family costs O(order) per sample; RLS costs O(order^2).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.config import get_settings
from sigfilt.errors import InvalidSpecificationError, ensure_positive


class UpdateRule(ABC):
    """Weight-update strategy plugged into :class:`~sigfilt.adaptive.AdaptiveFilter`."""

    def __init__(self, mu: float, leakage: float = 0.0) -> None:
        self.mu = mu
        self.leakage = leakage

    def bind(self, order: int) -> None:
        """Allocate per-order state; called once by the owning filter."""

    def reset(self) -> None:
        """Restore the rule's initial state."""

    @abstractmethod
    def update(self, weights: NDArray[np.float64], x: NDArray[np.float64], error: float) -> None:
        """Update ``weights`` in place."""

    def _leak(self, weights: NDArray[np.float64]) -> None:
        if self.leakage:
            weights *= 1 - self.leakage * self.mu


class LmsRule(UpdateRule):
    """Least mean squares."""

    def __init__(self, mu: float = 0.75, leakage: float = 0.0) -> None:
        super().__init__(mu, leakage)

    def update(self, weights: NDArray[np.float64], x: NDArray[np.float64], error: float) -> None:
        self._leak(weights)
        weights += self.mu * error * x


class SignLmsRule(UpdateRule):
    """Sign-sign LMS: only the signs of error and input are used."""

    def __init__(self, mu: float = 0.75, leakage: float = 0.0) -> None:
        super().__init__(mu, leakage)

    def update(self, weights: NDArray[np.float64], x: NDArray[np.float64], error: float) -> None:
        self._leak(weights)
        weights += self.mu * np.sign(error) * np.sign(x)


class NlmsRule(UpdateRule):
    """Normalized LMS: the step is divided by the window energy."""

    def __init__(self, mu: float = 0.75, eps: float = 1.0, leakage: float = 0.0) -> None:
        super().__init__(mu, leakage)
        self.eps = eps

    def update(self, weights: NDArray[np.float64], x: NDArray[np.float64], error: float) -> None:
        self._leak(weights)
        weights += self.mu * error * x / (self.eps + np.dot(x, x))


class LmfRule(UpdateRule):
    """Least mean fourth: gradient of e^4."""

    def __init__(self, mu: float = 0.1, leakage: float = 0.0) -> None:
        super().__init__(mu, leakage)

    def update(self, weights: NDArray[np.float64], x: NDArray[np.float64], error: float) -> None:
        self._leak(weights)
        weights += 4 * self.mu * error**3 * x


class NlmfRule(UpdateRule):
    """Normalized least mean fourth."""

    def __init__(self, mu: float = 0.75, eps: float = 1.0, leakage: float = 0.0) -> None:
        super().__init__(mu, leakage)
        self.eps = eps

    def update(self, weights: NDArray[np.float64], x: NDArray[np.float64], error: float) -> None:
        self._leak(weights)
        weights += 4 * self.mu * error**3 * x / (self.eps + np.dot(x, x))


class VariableStepLmsRule(UpdateRule):
    """LMS with one step size per tap.

    Args:
        mu: Per-tap step sizes; None means 0.75 for every tap.
        leakage: Leakage factor.
    """

    def __init__(self, mu: Optional[ArrayLike] = None, leakage: float = 0.0) -> None:
        super().__init__(0.0, leakage)
        self._requested = None if mu is None else np.asarray(mu, dtype=np.float64).reshape(-1)
        self.steps: NDArray[np.float64] = np.zeros(0)

    def bind(self, order: int) -> None:
        """Raises InvalidSpecificationError if the step array length differs from order."""
        if self._requested is None:
            self.steps = np.full(order, 0.75)
        elif len(self._requested) != order:
            raise InvalidSpecificationError(
                f"mu must have {order} step sizes, got {len(self._requested)}",
                parameter="mu",
                expected=order,
                actual=len(self._requested),
            )
        else:
            self.steps = self._requested.copy()

    def update(self, weights: NDArray[np.float64], x: NDArray[np.float64], error: float) -> None:
        if self.leakage:
            weights *= 1 - self.leakage * self.steps
        weights += self.steps * error * x


class RlsRule(UpdateRule):
    """Recursive least squares.

    Owns the order x order inverse correlation estimate P (initialised to
    ``initial_diagonal`` * I), the gain vector and scratch matrices. Per
    sample:

        g = P x / (lambda + x' P x)
        P = (P - g x' P) / lambda
        w = w + g e

    Args:
        forgetting_factor: lambda in (0, 1]; defaults to ``rls_forgetting_factor``.
        initial_diagonal: Initial P diagonal; defaults to ``rls_initial_diagonal``.
    """

    def __init__(
        self,
        forgetting_factor: Optional[float] = None,
        initial_diagonal: Optional[float] = None,
    ) -> None:
        super().__init__(mu=0.0)
        settings = get_settings()
        self.forgetting_factor = (
            settings.rls_forgetting_factor if forgetting_factor is None else forgetting_factor
        )
        self.initial_diagonal = (
            settings.rls_initial_diagonal if initial_diagonal is None else initial_diagonal
        )
        if not 0.0 < self.forgetting_factor <= 1.0:
            raise InvalidSpecificationError(
                f"forgetting_factor must be in (0, 1], got {self.forgetting_factor}",
                parameter="forgetting_factor",
                expected="(0, 1]",
                actual=self.forgetting_factor,
            )
        ensure_positive(self.initial_diagonal, "initial_diagonal")

        self.p = np.zeros((0, 0))
        self._gains = np.zeros(0)
        self._px = np.zeros(0)
        self._outer = np.zeros((0, 0))
        self._dp = np.zeros((0, 0))

    def bind(self, order: int) -> None:
        self.p = np.zeros((order, order))
        self._gains = np.zeros(order)
        self._px = np.zeros(order)
        self._outer = np.zeros((order, order))
        self._dp = np.zeros((order, order))
        self.reset()

    def reset(self) -> None:
        self.p.fill(0.0)
        np.fill_diagonal(self.p, self.initial_diagonal)

    @property
    def gains(self) -> NDArray[np.float64]:
        """Copy of the last gain vector."""
        return self._gains.copy()

    def update(self, weights: NDArray[np.float64], x: NDArray[np.float64], error: float) -> None:
        np.dot(self.p, x, out=self._px)
        denominator = self.forgetting_factor + np.dot(x, self._px)
        np.divide(self._px, denominator, out=self._gains)

        np.outer(self._gains, x, out=self._outer)
        np.dot(self._outer, self.p, out=self._dp)
        self.p -= self._dp
        self.p /= self.forgetting_factor

        weights += self._gains * error
