"""Engine settings: defaults, persistence and the active settings instance."""

from sigfilt.config.settings import (
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

__all__ = [
    "APP_NAME",
    "SETTINGS_VERSION",
    "EngineSettings",
    "SettingsStore",
    "get_settings",
    "get_settings_dir",
    "get_settings_path",
    "reset_settings",
    "set_settings",
]
