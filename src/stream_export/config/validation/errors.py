"""Config validation errors."""
from stream_export.kernel.errors import ConfigurationError


class MissingRequiredSettingError(ConfigurationError):
    """A required environment variable / setting is absent."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"Required setting '{setting_name}' is missing", setting=setting_name)
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigurationError):
    """A setting's value is present but semantically invalid."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(
            f"Setting '{setting_name}' has invalid value {value!r}: {reason}",
            setting=setting_name,
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["InvalidSettingValueError", "MissingRequiredSettingError"]
