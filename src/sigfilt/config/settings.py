"""Engine settings storage and management.

Settings hold the tunable defaults of the design and processing routines
(FFT thresholds, response lengths, RLS initialisation, log level). They are
stored as JSON in the OS user config directory via platformdirs, using atomic
writes (temp file + rename) to prevent corruption.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import platformdirs

from sigfilt.errors import InvalidSpecificationError

# Settings format version for migrations
SETTINGS_VERSION = 1

# App name for platformdirs
APP_NAME = "sigfilt"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


@dataclass
class EngineSettings:
    """Tunable defaults for filter design and processing."""

    settings_version: int = SETTINGS_VERSION

    # FIR offline filtering
    fir_fft_threshold: int = 64
    block_fft_factor: int = 4

    # Analysis
    impulse_response_length: int = 512
    frequency_response_size: int = 512

    # Zero-phase filtering
    zero_phase_pad_factor: int = 3

    # Elliptic prototype
    landen_iterations: int = 5

    # RLS
    rls_initial_diagonal: float = 100.0
    rls_forgetting_factor: float = 0.99

    log_level: str = "WARNING"

    def validate(self) -> None:
        """Check every field.

        Raises:
            InvalidSpecificationError: If a value is out of range.
        """
        for name in (
            "fir_fft_threshold",
            "block_fft_factor",
            "impulse_response_length",
            "frequency_response_size",
            "zero_phase_pad_factor",
            "landen_iterations",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise InvalidSpecificationError(
                    f"{name} must be a positive integer, got {value!r}",
                    parameter=name,
                    expected="> 0",
                    actual=value,
                )
        if self.rls_initial_diagonal <= 0:
            raise InvalidSpecificationError(
                f"rls_initial_diagonal must be positive, got {self.rls_initial_diagonal}",
                parameter="rls_initial_diagonal",
                actual=self.rls_initial_diagonal,
            )
        if not 0.0 < self.rls_forgetting_factor <= 1.0:
            raise InvalidSpecificationError(
                f"rls_forgetting_factor must be in (0, 1], got {self.rls_forgetting_factor}",
                parameter="rls_forgetting_factor",
                expected="(0, 1]",
                actual=self.rls_forgetting_factor,
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise InvalidSpecificationError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}",
                parameter="log_level",
                expected=_LOG_LEVELS,
                actual=self.log_level,
            )


def get_settings_dir() -> Path:
    """Return the OS-specific user config directory for sigfilt."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_settings_path() -> Path:
    """Return the full path to the settings.json file."""
    return get_settings_dir() / "settings.json"


class SettingsStore:
    """Handles loading and saving engine settings with atomic writes.

    Example usage:
        store = SettingsStore()
        settings = store.load()
        settings.fir_fft_threshold = 128
        store.save(settings)
    """

    def __init__(self, settings_path: Path | None = None) -> None:
        """Initialize the settings store.

        Args:
            settings_path: Custom path for the settings file. If None, uses
                the default OS config directory location.
        """
        self._path = settings_path or get_settings_path()

    @property
    def path(self) -> Path:
        """Return the settings file path."""
        return self._path

    def load(self) -> EngineSettings:
        """Load settings from disk.

        Returns:
            EngineSettings with values from disk, or defaults if the file
            doesn't exist or is unreadable.

        Raises:
            InvalidSpecificationError: If the file holds out-of-range values.
        """
        if not self._path.exists():
            return EngineSettings()

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
            return EngineSettings()

        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self._path)
            return EngineSettings()

        settings = self._from_dict(data)
        settings.validate()
        return settings

    def save(self, settings: EngineSettings) -> None:
        """Save settings to disk using atomic write.

        Args:
            settings: The settings to save.

        Raises:
            InvalidSpecificationError: If the settings are invalid.
            OSError: If the directory cannot be created or write fails.
        """
        settings.validate()
        settings.settings_version = SETTINGS_VERSION

        self._path.parent.mkdir(parents=True, exist_ok=True)

        content = json.dumps(asdict(settings), indent=2, ensure_ascii=False)

        fd, tmp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix="settings_",
            dir=self._path.parent,
        )
        try:
            try:
                os.write(fd, content.encode("utf-8"))
                os.fsync(fd)
            finally:
                os.close(fd)
            os.replace(tmp_path, self._path)
        except BaseException:
            # Clean up temp file on any error
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def _from_dict(self, data: dict[str, Any]) -> EngineSettings:
        """Convert a dictionary to EngineSettings.

        Unknown keys are ignored, missing keys use defaults.
        """
        valid_fields = set(EngineSettings.__dataclass_fields__)
        kwargs = {key: value for key, value in data.items() if key in valid_fields}
        return EngineSettings(**kwargs)


_active: EngineSettings | None = None


def get_settings() -> EngineSettings:
    """Return the process-wide active settings, loading them on first use."""
    global _active
    if _active is None:
        _active = SettingsStore().load()
    return _active


def set_settings(settings: EngineSettings) -> None:
    """Replace the active settings.

    Raises:
        InvalidSpecificationError: If the settings are invalid.
    """
    global _active
    settings.validate()
    _active = settings


def reset_settings() -> None:
    """Restore built-in defaults as the active settings."""
    global _active
    _active = EngineSettings()
