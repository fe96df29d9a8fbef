"""Application export – ExportConfig and layered configuration.

Raw configuration mixes settings for every format with per-format blocks::

    {
        "limit": 1000,                          # all formats
        "csv": {"fields": ["email", "created"]} # csv only
    }

The effective settings for a format are built by deep-merging built-in
defaults, then the cross-format settings, then the format's own block.
"""
from __future__ import annotations

import codecs
import dataclasses
from typing import Any, Final, Iterable, Mapping

from stream_export.application.export.fields import FieldSpec, parse_field_spec
from stream_export.application.export.headers import validate_file_name_format
from stream_export.config.merge import deep_merge
from stream_export.kernel.errors import ConfigurationError

INHERIT: Final = "inherit"

DEFAULTS: Final[Mapping[str, Any]] = {
    "auto": True,
    "find_options": INHERIT,
    "fields": None,
    "limit": 500,
    "data_var_name": None,
    "layout": None,
    "view_file": None,
    "file_name_format": "%controllerName%-%conditions%-%dateTime%",
    "char_encoding": "UTF-16LE",
}


@dataclasses.dataclass(frozen=True)
class ExportConfig:
    """Immutable settings for one export run."""

    auto: bool = True
    find_options: str | Mapping[str, Any] = INHERIT
    fields: tuple[FieldSpec, ...] | None = None
    limit: int | None = 500
    data_var_name: str | None = None
    layout: str | None = None
    view_file: str | None = None
    file_name_format: str = DEFAULTS["file_name_format"]
    char_encoding: str | None = "UTF-16LE"

    def __post_init__(self) -> None:
        if self.find_options != INHERIT and not isinstance(self.find_options, Mapping):
            raise ConfigurationError(
                f"find_options must be {INHERIT!r} or a mapping, got {self.find_options!r}",
                setting="find_options",
            )
        if self.limit is not None and (
            isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1
        ):
            raise ConfigurationError(f"limit must be a positive integer, got {self.limit!r}", setting="limit")
        if self.char_encoding:
            try:
                codecs.lookup(self.char_encoding)
            except LookupError as exc:
                raise ConfigurationError(
                    f"Unknown character encoding {self.char_encoding!r}", setting="char_encoding", cause=exc
                ) from exc
        if not isinstance(self.file_name_format, str) or not self.file_name_format:
            raise ConfigurationError("file_name_format must be a non-empty string", setting="file_name_format")
        validate_file_name_format(self.file_name_format)

    @property
    def inherits_pagination(self) -> bool:
        return self.find_options == INHERIT

    def replace(self, **changes: Any) -> "ExportConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ExportConfig":
        """Validate a fully merged settings mapping."""
        unknown = set(raw) - set(DEFAULTS)
        if unknown:
            raise ConfigurationError(f"Unknown export setting(s): {sorted(unknown)}")
        values = dict(raw)
        values["fields"] = parse_field_spec(values.get("fields"))
        return cls(**values)


def split_layers(
    config: Mapping[str, Any] | None,
    formats: Iterable[str],
) -> tuple[dict[str, Any], dict[str, dict[str, Any]]]:
    """Separate cross-format settings from per-format blocks."""
    config = config or {}
    names = set(formats)
    shared = {k: v for k, v in config.items() if k not in names}
    specific: dict[str, dict[str, Any]] = {}
    for name in names:
        block = config.get(name)
        if block is None:
            continue
        if not isinstance(block, Mapping):
            raise ConfigurationError(f"Settings for format {name!r} must be a mapping", setting=name)
        specific[name] = dict(block)
    return shared, specific


def merge_layers(*layers: Mapping[str, Any] | None, defaults: Mapping[str, Any] = DEFAULTS) -> ExportConfig:
    """defaults → cross-format → format-specific → per-run; later wins."""
    return ExportConfig.from_mapping(deep_merge(defaults, *layers))


__all__ = ["DEFAULTS", "INHERIT", "ExportConfig", "merge_layers", "split_layers"]
