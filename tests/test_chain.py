"""Tests for filter chains and runtime combination."""

import numpy as np
import pytest

from sigfilt.errors import InvalidSpecificationError
from sigfilt.models import DiscreteSignal
from sigfilt.processing import (
    FilterChain,
    FirFilter,
    IirFilter,
    OnlineFilter,
    combine_parallel,
    combine_series,
    make_filter,
)
from sigfilt.transfer_function import TransferFunction


class Gain:
    """Minimal online stage without a transfer function."""

    def __init__(self, factor: float) -> None:
        self.factor = factor
        self.resets = 0

    def process(self, sample: float) -> float:
        return self.factor * sample

    def reset(self) -> None:
        self.resets += 1


class TestFilterChain:
    """Tests for FilterChain."""

    def test_empty_chain_passes_through(self) -> None:
        """No stages means identity."""
        chain = FilterChain()
        assert chain.process(0.7) == pytest.approx(0.7)
        assert len(chain) == 0

    def test_stages_run_in_order(self) -> None:
        """Samples flow through every stage."""
        chain = FilterChain([FirFilter([1.0, 1.0]), Gain(2.0)])
        out = [chain.process(x) for x in (1.0, 0.0, 0.0)]
        np.testing.assert_allclose(out, [2.0, 2.0, 0.0])

    def test_process_batch_matches_process(self, noise: DiscreteSignal) -> None:
        """Block path equals the per-sample path, including stages without process_batch."""
        looped = FilterChain([IirFilter([0.2], [1.0, -0.8]), Gain(0.5), FirFilter([0.5, 0.5])])
        batched = FilterChain([IirFilter([0.2], [1.0, -0.8]), Gain(0.5), FirFilter([0.5, 0.5])])
        x = noise.samples[:200]
        np.testing.assert_allclose(batched.process_batch(x), [looped.process(s) for s in x], atol=1e-6)

    def test_disabled_passes_through(self) -> None:
        """A disabled chain returns its input."""
        chain = FilterChain([Gain(3.0)], enabled=False)
        assert chain.process(1.5) == 1.5
        np.testing.assert_array_equal(chain.process_batch([1.0, 2.0]), [1.0, 2.0])

    def test_reenable_resets_stages(self) -> None:
        """Switching back on clears stale stage state."""
        stage = IirFilter([1.0], [1.0, -0.5])
        chain = FilterChain([stage])
        chain.process(1.0)
        chain.enabled = False
        chain.enabled = True
        assert chain.process(0.0) == 0.0

    def test_enable_when_enabled_keeps_state(self) -> None:
        """Setting enabled to its current value does not reset."""
        gain = Gain(1.0)
        chain = FilterChain([gain])
        chain.enabled = True
        assert gain.resets == 0

    def test_add_insert_remove(self) -> None:
        """Stages can be managed by index."""
        first, second, third = Gain(1.0), Gain(2.0), Gain(3.0)
        chain = FilterChain([first])
        chain.add(third)
        chain.insert(1, second)
        assert list(chain) == [first, second, third]
        assert chain[1] is second
        assert chain.remove_at(0) is first
        assert chain.process(1.0) == pytest.approx(6.0)

    def test_from_sos_and_tf(self) -> None:
        """from_sos builds IIR stages whose cascade is the product."""
        sections = [TransferFunction([1.0, 1.0], [1.0, -0.5]), TransferFunction([1.0, -1.0], [1.0, 0.25])]
        chain = FilterChain.from_sos(sections)
        assert all(isinstance(stage, IirFilter) for stage in chain)
        np.testing.assert_allclose(chain.tf.numerator, [1.0, 0.0, -1.0])
        np.testing.assert_allclose(chain.tf.denominator, [1.0, -0.25, -0.125])

    def test_tf_needs_transfer_functions(self) -> None:
        """A stage without tf makes the overall tf undefined."""
        chain = FilterChain([FirFilter([1.0]), Gain(2.0)])
        with pytest.raises(InvalidSpecificationError, match="Gain has no transfer function"):
            chain.tf

    def test_apply_to(self) -> None:
        """apply_to keeps the sampling rate."""
        chain = FilterChain([Gain(2.0)])
        out = chain.apply_to(DiscreteSignal(44100, [1.0, 2.0]))
        assert out.sampling_rate == 44100
        np.testing.assert_allclose(out.samples, [2.0, 4.0])

    def test_reset(self) -> None:
        """reset() reaches every stage."""
        stages = [Gain(1.0), Gain(1.0)]
        FilterChain(stages).reset()
        assert [stage.resets for stage in stages] == [1, 1]

    def test_online_filter_protocol(self) -> None:
        """Runtime filters and simple stages satisfy OnlineFilter."""
        assert isinstance(FirFilter([1.0]), OnlineFilter)
        assert isinstance(Gain(1.0), OnlineFilter)
        assert isinstance(FilterChain(), OnlineFilter)


class TestCombine:
    """Tests for make_filter / combine_series / combine_parallel."""

    def test_make_filter_picks_variant(self) -> None:
        """FIR systems get FirFilter, recursive ones IirFilter."""
        assert isinstance(make_filter(TransferFunction([1.0, 2.0])), FirFilter)
        assert isinstance(make_filter(TransferFunction([1.0], [1.0, -0.5])), IirFilter)

    def test_parallel_fir_stays_fir(self) -> None:
        """Two FIR filters sum to one FIR filter."""
        combined = combine_parallel(FirFilter([1.0, -0.1]), FirFilter([1.0, -0.6]))
        assert isinstance(combined, FirFilter)
        np.testing.assert_allclose(combined.kernel, [2.0, -0.7])

    def test_parallel_with_iir(self) -> None:
        """Any recursive operand makes the sum recursive."""
        combined = combine_parallel(FirFilter([1.0, -0.1]), IirFilter([1.0, 0.4], [1.0, -0.6]))
        assert isinstance(combined, IirFilter)
        np.testing.assert_allclose(combined.numerator, [2.0, -0.3, 0.06], atol=1e-7)

    def test_series_output_equals_cascade(self, noise: DiscreteSignal) -> None:
        """Running the combined filter equals running both in turn."""
        first = FirFilter([0.5, 0.5])
        second = IirFilter([0.3], [1.0, -0.7])
        combined = combine_series(first, second)
        x = noise.samples[:300]
        cascade = second.process_batch(first.process_batch(x))
        np.testing.assert_allclose(combined.process_batch(x), cascade, atol=1e-5)

    def test_accepts_transfer_functions(self) -> None:
        """Transfer functions can be combined directly."""
        combined = combine_series(TransferFunction([1.0, 1.0]), TransferFunction([1.0, -1.0]))
        np.testing.assert_allclose(combined.kernel, [1.0, 0.0, -1.0])
