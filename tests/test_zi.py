"""Tests for the transposed-state filter."""

import math

import numpy as np
import pytest

from sigfilt.errors import InvalidCoefficientError, InvalidSpecificationError, OrderMismatchError
from sigfilt.models import DiscreteSignal
from sigfilt.processing import IirFilter, ZiFilter
from sigfilt.transfer_function import TransferFunction


class TestZiFilter:
    """Tests for ZiFilter streaming."""

    def test_matches_direct_form(self, noise: DiscreteSignal) -> None:
        """Transposed form and direct form compute the same system."""
        b, a = [0.1, 0.25, 0.1], [1.0, -0.8, 0.3]
        zi = ZiFilter(b, a)
        iir = IirFilter(b, a)
        x = noise.samples[:500]
        np.testing.assert_allclose(zi.process_batch(x), iir.process_batch(x), atol=1e-5)

    def test_process_batch_matches_process(self, noise: DiscreteSignal) -> None:
        """Block and per-sample paths agree."""
        looped = ZiFilter([0.3, 0.3], [1.0, -0.4])
        batched = ZiFilter([0.3, 0.3], [1.0, -0.4])
        x = noise.samples[:200]
        expected = [looped.process(s) for s in x]
        np.testing.assert_allclose(batched.process_batch(x), expected, atol=1e-6)

    def test_unequal_polynomial_lengths(self) -> None:
        """The shorter polynomial is zero-padded."""
        zi = ZiFilter([1.0, 0.4], [1.0, -0.6, 0.2])
        assert len(zi.state) == 3
        np.testing.assert_allclose(zi.process_batch([1.0, 0.0, 0.0, 0.0]), [1.0, 1.0, 0.4, 0.04], atol=1e-7)

    def test_init_state_steady(self) -> None:
        """Starting from the steady state gives the settled output at once."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        zi.init_state(zi.tf.steady_state() * 3.0)
        assert zi.process(3.0) == pytest.approx(3.0)
        assert zi.process(3.0) == pytest.approx(3.0)

    def test_init_state_full_length(self) -> None:
        """A full-length state vector is accepted."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        zi.init_state([0.5, 0.0])
        np.testing.assert_allclose(zi.state, [0.5, 0.0])

    def test_init_state_wrong_length(self) -> None:
        """Other lengths are rejected."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        with pytest.raises(InvalidSpecificationError, match="state must have 1 or 2 values, got 3"):
            zi.init_state([1.0, 2.0, 3.0])

    def test_reset(self) -> None:
        """reset() zeroes the state."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        zi.process_batch([1.0, 2.0])
        zi.reset()
        np.testing.assert_array_equal(zi.state, [0.0, 0.0])

    def test_reset_matches_fresh_filter(self, noise: DiscreteSignal) -> None:
        """After one or two resets the output equals a fresh filter's."""
        b, a = [0.1, 0.25, 0.1], [1.0, -0.8, 0.3]
        x = noise.samples[:200]
        expected = ZiFilter(b, a).process_batch(x)
        zi = ZiFilter(b, a)
        zi.process_batch(noise.samples[200:400])
        zi.reset()
        np.testing.assert_array_equal(zi.process_batch(x), expected)
        zi.reset()
        zi.reset()
        np.testing.assert_array_equal(zi.process_batch(x), expected)


class TestZiCoefficientChanges:
    """Tests for online coefficient replacement."""

    def test_change_keeps_state(self) -> None:
        """change() swaps coefficients and leaves the state intact."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        zi.process_batch([1.0, -1.0, 2.0])
        before = zi.state
        zi.change(TransferFunction([0.5, 0.5], [1.0, -0.2]))
        np.testing.assert_array_equal(zi.state, before)
        np.testing.assert_allclose(zi.tf.numerator, [0.5, 0.5])

    def test_change_order_mismatch(self) -> None:
        """Coefficient counts must match the live filter."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        with pytest.raises(OrderMismatchError, match="Cannot change denominator"):
            zi.change(TransferFunction([0.2, 0.2], [1.0, -0.6, 0.1]))

    def test_change_numerator(self) -> None:
        """Numerator-only replacement."""
        zi = ZiFilter([1.0, 0.0], [1.0, -0.5])
        zi.change_numerator([0.0, 1.0])
        np.testing.assert_allclose(zi.tf.numerator, [0.0, 1.0])
        np.testing.assert_allclose(zi.process_batch([1.0, 0.0, 0.0]), [0.0, 1.0, 0.5])

    def test_change_numerator_length_mismatch(self) -> None:
        """Numerator length must match."""
        zi = ZiFilter([1.0, 0.0], [1.0, -0.5])
        with pytest.raises(OrderMismatchError, match="Cannot change numerator"):
            zi.change_numerator([1.0])

    def test_change_denominator_normalizes(self) -> None:
        """A leading coefficient other than 1 is divided out of both polynomials."""
        zi = ZiFilter([1.0], [1.0, -0.5])
        zi.change_denominator([2.0, -1.0])
        np.testing.assert_allclose(zi.tf.numerator, [0.5])
        np.testing.assert_allclose(zi.tf.denominator, [1.0, -0.5])

    def test_change_denominator_zero_leading(self) -> None:
        """a[0] = 0 is rejected."""
        zi = ZiFilter([1.0], [1.0, -0.5])
        with pytest.raises(InvalidCoefficientError, match=r"denominator\[0\] cannot be zero"):
            zi.change_denominator([0.0, 1.0])

    def test_apply_to_is_online(self) -> None:
        """apply_to continues from, and updates, the live state."""
        zi = ZiFilter([1.0], [1.0, -0.5])
        first = zi.apply_to(DiscreteSignal(10, [1.0, 0.0]))
        second = zi.apply_to(DiscreteSignal(10, [0.0, 0.0]))
        np.testing.assert_allclose(first.samples, [1.0, 0.5])
        np.testing.assert_allclose(second.samples, [0.25, 0.125])


class TestZeroPhase:
    """Tests for forward-backward filtering."""

    def test_constant_passes_unchanged(self) -> None:
        """A unit-DC-gain low-pass leaves a constant untouched at the edges too."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        out = zi.zero_phase(DiscreteSignal(1000, np.full(50, 2.0)))
        assert len(out) == 50
        np.testing.assert_allclose(out.samples, 2.0, atol=1e-5)

    def test_live_state_untouched(self) -> None:
        """zero_phase does not modify the filter's own state."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        zi.process_batch([1.0, 2.0, 3.0])
        before = zi.state
        zi.zero_phase(DiscreteSignal(1000, np.arange(20.0)))
        np.testing.assert_array_equal(zi.state, before)

    def test_no_phase_shift(self) -> None:
        """A sinusoid comes out scaled by |H|^2 and not delayed."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        n = np.arange(1000)
        freq = 0.01
        x = np.sin(2 * math.pi * freq * n)
        out = zi.zero_phase(DiscreteSignal(1000, x))
        gain = abs(zi.tf.response_at(2 * math.pi * freq)) ** 2
        np.testing.assert_allclose(out.samples[200:800], gain * x[200:800], atol=1e-3)

    def test_pad_length_too_long(self) -> None:
        """The edge extension must be shorter than the signal."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        with pytest.raises(InvalidSpecificationError, match=r"pad_length \(3\) must be less than the signal length \(3\)"):
            zi.zero_phase(DiscreteSignal(1000, [1.0, 2.0, 3.0]))

    def test_explicit_pad_length(self) -> None:
        """An explicit pad length is honoured."""
        zi = ZiFilter([0.2, 0.2], [1.0, -0.6])
        out = zi.zero_phase(DiscreteSignal(1000, np.ones(30)), pad_length=10)
        np.testing.assert_allclose(out.samples, 1.0, atol=1e-5)
