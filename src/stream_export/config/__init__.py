"""Config – env-based settings, loaders and layered merging."""

from stream_export.config.merge import deep_merge
from stream_export.config.settings import EnvSettingsLoader, ExportSettings, Settings, SettingsLoader
from stream_export.config.validation import InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "EnvSettingsLoader",
    "ExportSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
    "deep_merge",
]
