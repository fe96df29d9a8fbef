"""Export errors – raised before the first byte reaches the client."""

from __future__ import annotations

from typing import Any

from stream_export.kernel.errors.base import BaseError


class ExportError(BaseError):
    """An export run could not be set up."""

    default_code = "export_error"


class UnsupportedFormatError(ExportError):
    """The requested format is not in the format registry.

    Callers treat this as "nothing to do here" and fall through to their
    normal handling rather than failing the request.
    """

    default_code = "unsupported_format"

    def __init__(self, format: str, **kwargs: Any) -> None:  # noqa: A002
        super().__init__(f"Unsupported export format: {format!r}", **kwargs)
        self.format = format
        self._annotate(format=format)


class ConfigurationError(ExportError):
    """Malformed field spec, file name template or export setting."""

    default_code = "export_configuration_error"

    def __init__(self, message: str, *, setting: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.setting = setting
        self._annotate(setting=setting)


__all__ = ["ConfigurationError", "ExportError", "UnsupportedFormatError"]
