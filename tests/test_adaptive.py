"""Tests for adaptive filters and update rules."""

import numpy as np
import pytest

from sigfilt.adaptive import (
    AdaptiveFilter,
    LmfRule,
    LmsRule,
    NlmfRule,
    NlmsRule,
    RlsRule,
    SignLmsRule,
    UpdateRule,
    VariableStepLmsRule,
)
from sigfilt.errors import InvalidSpecificationError, OrderMismatchError, RateMismatchError
from sigfilt.models import DiscreteSignal

UNKNOWN_SYSTEM = np.array([0.5, -0.3, 0.2])


def _identification_pair(rng: np.random.Generator, n: int) -> tuple[np.ndarray, np.ndarray]:
    x = rng.standard_normal(n)
    d = np.convolve(x, UNKNOWN_SYSTEM)[:n]
    return x, d


class TestSingleUpdate:
    """One sample, known error: each rule's update formula."""

    @pytest.mark.parametrize(
        ("rule", "expected"),
        [
            (LmsRule(mu=0.5), [1.0, 0.0]),
            (SignLmsRule(mu=0.1), [0.1, 0.0]),
            (NlmsRule(mu=0.5, eps=1.0), [0.5, 0.0]),
            (LmfRule(mu=0.1), [3.2, 0.0]),
            (NlmfRule(mu=0.75, eps=1.0), [12.0, 0.0]),
            (VariableStepLmsRule([0.25, 0.5]), [0.5, 0.0]),
        ],
    )
    def test_first_step(self, rule: UpdateRule, expected: list[float]) -> None:
        """Zero weights, input 1, desired 2: error is 2."""
        adaptive = AdaptiveFilter(2, rule)
        assert adaptive.process(1.0, 2.0) == 0.0
        np.testing.assert_allclose(adaptive.weights, expected)

    def test_leakage(self) -> None:
        """Leakage shrinks the weights before the update."""
        adaptive = AdaptiveFilter(2, LmsRule(mu=0.5, leakage=0.1), weights=[1.0, 1.0])
        assert adaptive.process(1.0, 2.0) == pytest.approx(1.0)
        np.testing.assert_allclose(adaptive.weights, [1.45, 0.95])

    def test_output_before_update(self) -> None:
        """process() returns the prediction of the old weights."""
        adaptive = AdaptiveFilter(1, LmsRule(mu=0.5), weights=[2.0])
        assert adaptive.process(1.0, 0.0) == pytest.approx(2.0)
        assert adaptive.predict(1.0) == pytest.approx(1.0)


class TestConvergence:
    """System identification of a known FIR."""

    @pytest.mark.parametrize("rule", [LmsRule(mu=0.05), NlmsRule(mu=0.5)])
    def test_lms_family(self, rule: UpdateRule, rng: np.random.Generator) -> None:
        """Noise-free identification recovers the system."""
        x, d = _identification_pair(rng, 4000)
        adaptive = AdaptiveFilter(3, rule)
        adaptive.process_batch(x, d)
        np.testing.assert_allclose(adaptive.weights, UNKNOWN_SYSTEM, atol=1e-3)

    def test_rls(self, rng: np.random.Generator) -> None:
        """RLS converges in far fewer samples."""
        x, d = _identification_pair(rng, 300)
        adaptive = AdaptiveFilter(3, RlsRule())
        out = adaptive.process_batch(x, d)
        np.testing.assert_allclose(adaptive.weights, UNKNOWN_SYSTEM, atol=1e-4)
        np.testing.assert_allclose(out[-50:], d[-50:], atol=1e-4)

    def test_rls_defaults_from_settings(self) -> None:
        """Unset RLS parameters come from the engine settings."""
        rule = RlsRule()
        assert rule.forgetting_factor == 0.99
        assert rule.initial_diagonal == 100
        AdaptiveFilter(2, rule)
        np.testing.assert_array_equal(rule.p, 100 * np.eye(2))

    def test_rls_invalid_forgetting_factor(self) -> None:
        """lambda must be in (0, 1]."""
        with pytest.raises(InvalidSpecificationError, match=r"forgetting_factor must be in \(0, 1\]"):
            RlsRule(forgetting_factor=1.5)

    def test_rls_invalid_diagonal(self) -> None:
        """The initial diagonal must be positive."""
        with pytest.raises(InvalidSpecificationError, match="initial_diagonal must be positive"):
            RlsRule(initial_diagonal=0.0)


class TestAdaptiveFilter:
    """Tests for AdaptiveFilter bookkeeping."""

    def test_invalid_order(self) -> None:
        """Order must be positive."""
        with pytest.raises(InvalidSpecificationError, match="order must be positive"):
            AdaptiveFilter(0, LmsRule())

    def test_weights_length_mismatch(self) -> None:
        """Initial weights must have one value per tap."""
        with pytest.raises(OrderMismatchError, match="Cannot change weights: expected 3 coefficients, got 2"):
            AdaptiveFilter(3, LmsRule(), weights=[1.0, 2.0])

    def test_variable_step_length_mismatch(self) -> None:
        """Per-tap steps must match the order."""
        with pytest.raises(InvalidSpecificationError, match="mu must have 3 step sizes, got 2"):
            AdaptiveFilter(3, VariableStepLmsRule([0.1, 0.2]))

    def test_variable_step_default(self) -> None:
        """Without explicit steps every tap uses 0.75."""
        rule = VariableStepLmsRule()
        AdaptiveFilter(4, rule)
        np.testing.assert_array_equal(rule.steps, [0.75] * 4)

    def test_default_steps(self) -> None:
        """LMS-family defaults."""
        assert LmsRule().mu == 0.75
        assert NlmsRule().mu == 0.75
        assert SignLmsRule().mu == 0.75
        assert LmfRule().mu == 0.1

    def test_reset_restores_initial_weights(self, rng: np.random.Generator) -> None:
        """reset() returns to the starting weights; repeating it changes nothing."""
        adaptive = AdaptiveFilter(3, RlsRule(), weights=[0.1, 0.2, 0.3])
        x, d = _identification_pair(rng, 50)
        first = adaptive.process_batch(x, d)
        adaptive.reset()
        adaptive.reset()
        np.testing.assert_array_equal(adaptive.weights, [0.1, 0.2, 0.3])
        np.testing.assert_array_equal(adaptive.process_batch(x, d), first)

    def test_random_weights_reproducible(self) -> None:
        """Seeded random weights are repeatable and lie in [1, 2)."""
        first = AdaptiveFilter.with_random_weights(8, LmsRule(), seed=7).weights
        second = AdaptiveFilter.with_random_weights(8, LmsRule(), seed=7).weights
        np.testing.assert_array_equal(first, second)
        assert np.all((first >= 1.0) & (first < 2.0))

    def test_process_batch_length_mismatch(self) -> None:
        """Input and desired blocks must pair up."""
        adaptive = AdaptiveFilter(2, LmsRule())
        with pytest.raises(InvalidSpecificationError, match="input and desired lengths differ: 3 vs 2"):
            adaptive.process_batch([1.0, 2.0, 3.0], [1.0, 2.0])

    def test_apply_to(self, rng: np.random.Generator) -> None:
        """apply_to returns the output signal at the shared rate."""
        x, d = _identification_pair(rng, 100)
        adaptive = AdaptiveFilter(3, NlmsRule())
        out = adaptive.apply_to(DiscreteSignal(8000, x), DiscreteSignal(8000, d))
        assert out.sampling_rate == 8000
        assert len(out) == 100

    def test_apply_to_rate_mismatch(self) -> None:
        """Signals at different rates are rejected."""
        adaptive = AdaptiveFilter(2, LmsRule())
        with pytest.raises(RateMismatchError):
            adaptive.apply_to(DiscreteSignal(8000, [1.0]), DiscreteSignal(16000, [1.0]))
