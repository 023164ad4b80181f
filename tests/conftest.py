"""Pytest configuration for sigfilt tests."""

from pathlib import Path

import numpy as np
import pytest

from sigfilt.config import SettingsStore, reset_settings
from sigfilt.models import DiscreteSignal


@pytest.fixture(autouse=True)
def default_settings():
    """Run every test against built-in settings, never the user's config file."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings_store(tmp_path: Path) -> SettingsStore:
    """Settings store writing into the test's temporary directory."""
    return SettingsStore(tmp_path / "sigfilt" / "settings.json")


@pytest.fixture
def impulse() -> DiscreteSignal:
    """Unit impulse of 64 samples at 8 kHz."""
    return DiscreteSignal.unit(64, sampling_rate=8000)


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator so random inputs are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def noise(rng: np.random.Generator) -> DiscreteSignal:
    """One second of white noise at 8 kHz."""
    return DiscreteSignal(8000, rng.standard_normal(8000))
