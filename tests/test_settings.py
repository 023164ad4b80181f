"""Tests for engine settings storage and the active settings."""

import json
from pathlib import Path

import pytest

from sigfilt.config import (
    APP_NAME,
    SETTINGS_VERSION,
    EngineSettings,
    SettingsStore,
    get_settings,
    get_settings_dir,
    get_settings_path,
    reset_settings,
    set_settings,
)
from sigfilt.errors import InvalidSpecificationError


class TestEngineSettings:
    """Tests for EngineSettings dataclass."""

    def test_default_values(self) -> None:
        """Defaults match the documented engine behavior."""
        settings = EngineSettings()
        assert settings.settings_version == SETTINGS_VERSION
        assert settings.fir_fft_threshold == 64
        assert settings.block_fft_factor == 4
        assert settings.impulse_response_length == 512
        assert settings.frequency_response_size == 512
        assert settings.zero_phase_pad_factor == 3
        assert settings.landen_iterations == 5
        assert settings.rls_initial_diagonal == 100.0
        assert settings.rls_forgetting_factor == 0.99
        assert settings.log_level == "WARNING"

    def test_defaults_validate(self) -> None:
        """Default settings pass validation."""
        EngineSettings().validate()

    def test_non_positive_threshold_rejected(self) -> None:
        """Integer settings must be positive."""
        with pytest.raises(InvalidSpecificationError, match="fir_fft_threshold must be a positive integer"):
            EngineSettings(fir_fft_threshold=0).validate()

    def test_forgetting_factor_range(self) -> None:
        """Forgetting factor must be in (0, 1]."""
        EngineSettings(rls_forgetting_factor=1.0).validate()
        with pytest.raises(InvalidSpecificationError, match="rls_forgetting_factor"):
            EngineSettings(rls_forgetting_factor=1.5).validate()

    def test_unknown_log_level_rejected(self) -> None:
        """Log level must be a standard logging level name."""
        with pytest.raises(InvalidSpecificationError, match="log_level"):
            EngineSettings(log_level="CHATTY").validate()


class TestSettingsPaths:
    """Tests for settings file location."""

    def test_dir_uses_platformdirs(self) -> None:
        """Settings directory is named after the app."""
        assert APP_NAME in str(get_settings_dir())

    def test_path_filename(self) -> None:
        """Settings file is settings.json."""
        assert get_settings_path().name == "settings.json"


class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_load_returns_defaults_when_missing(self, settings_store: SettingsStore) -> None:
        """Missing file yields defaults."""
        assert settings_store.load() == EngineSettings()

    def test_save_creates_directory(self, settings_store: SettingsStore) -> None:
        """save() creates parent directories."""
        settings_store.save(EngineSettings())
        assert settings_store.path.exists()

    def test_save_and_load_roundtrip(self, settings_store: SettingsStore) -> None:
        """Saved values are loaded back."""
        settings = EngineSettings(fir_fft_threshold=128, log_level="DEBUG")
        settings_store.save(settings)
        loaded = settings_store.load()
        assert loaded.fir_fft_threshold == 128
        assert loaded.log_level == "DEBUG"

    def test_load_ignores_unknown_keys(self, settings_store: SettingsStore) -> None:
        """Unknown keys in the file are dropped."""
        settings_store.path.parent.mkdir(parents=True)
        settings_store.path.write_text(json.dumps({"block_fft_factor": 8, "colour": "blue"}))
        loaded = settings_store.load()
        assert loaded.block_fft_factor == 8

    def test_corrupt_file_falls_back_to_defaults(self, settings_store: SettingsStore) -> None:
        """Unparseable JSON yields defaults."""
        settings_store.path.parent.mkdir(parents=True)
        settings_store.path.write_text("{not json")
        assert settings_store.load() == EngineSettings()

    @pytest.mark.parametrize("payload", ["[]", "42", '"fast"', "null"])
    def test_non_object_file_falls_back_to_defaults(self, settings_store: SettingsStore, payload: str) -> None:
        """Valid JSON that is not an object yields defaults."""
        settings_store.path.parent.mkdir(parents=True)
        settings_store.path.write_text(payload)
        assert settings_store.load() == EngineSettings()

    def test_out_of_range_file_rejected(self, settings_store: SettingsStore) -> None:
        """A readable file with invalid values raises."""
        settings_store.path.parent.mkdir(parents=True)
        settings_store.path.write_text(json.dumps({"landen_iterations": -1}))
        with pytest.raises(InvalidSpecificationError):
            settings_store.load()

    def test_save_rejects_invalid(self, settings_store: SettingsStore) -> None:
        """Invalid settings are never written."""
        with pytest.raises(InvalidSpecificationError):
            settings_store.save(EngineSettings(block_fft_factor=0))
        assert not settings_store.path.exists()

    def test_no_temp_files_left(self, settings_store: SettingsStore) -> None:
        """Atomic write leaves only the settings file."""
        settings_store.save(EngineSettings())
        files = list(Path(settings_store.path.parent).iterdir())
        assert files == [settings_store.path]


class TestActiveSettings:
    """Tests for get_settings / set_settings / reset_settings."""

    def test_set_and_reset(self) -> None:
        """set_settings replaces the active settings until reset."""
        set_settings(EngineSettings(fir_fft_threshold=16))
        assert get_settings().fir_fft_threshold == 16
        reset_settings()
        assert get_settings().fir_fft_threshold == 64

    def test_set_invalid_rejected(self) -> None:
        """Invalid settings cannot become active."""
        with pytest.raises(InvalidSpecificationError):
            set_settings(EngineSettings(impulse_response_length=0))
        assert get_settings().impulse_response_length == 512
