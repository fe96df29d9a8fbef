"""Config validation errors."""
from stream_export.config.validation.errors import (
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = ["InvalidSettingValueError", "MissingRequiredSettingError"]
