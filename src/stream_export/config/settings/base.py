"""Config settings – Settings base class and ExportSettings."""
from __future__ import annotations

import codecs
import dataclasses
import logging
from typing import ClassVar

from stream_export.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class ExportSettings(Settings):
    """Process-wide export settings, read from ``EXPORT_*`` variables.

    ``app_encoding`` is the charset the data source stores text in; it is
    also the output charset for formats whose ``char_encoding`` is empty.
    """

    _prefix: ClassVar[str] = "EXPORT"

    app_encoding: str = "UTF-8"
    default_limit: int = 500
    log_level: str = "INFO"
    debug: bool = False

    def _validate(self) -> None:
        try:
            codecs.lookup(self.app_encoding)
        except LookupError as exc:
            raise InvalidSettingValueError("app_encoding", self.app_encoding, "unknown codec") from exc
        if self.default_limit < 1:
            raise InvalidSettingValueError("default_limit", self.default_limit, "must be >= 1")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise InvalidSettingValueError("log_level", self.log_level, "unknown log level")

    @property
    def level(self) -> int:
        return logging.DEBUG if self.debug else logging.getLevelName(self.log_level.upper())


__all__ = ["ExportSettings", "Settings"]
