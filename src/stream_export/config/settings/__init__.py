"""Config settings – 12-factor env-based configuration."""
from stream_export.config.settings.base import ExportSettings, Settings
from stream_export.config.settings.loaders import EnvSettingsLoader, SettingsLoader

__all__ = ["EnvSettingsLoader", "ExportSettings", "Settings", "SettingsLoader"]
