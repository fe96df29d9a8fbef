"""Application export – download file name and response headers.

File name templates may use three placeholders:

``%controllerName%``
    underscored resource name, ``EmailSignups`` → ``email_signups``
``%conditions%``
    best-effort string form of the find conditions
``%dateTime%``
    export time as ``YYYY-MM-DD-HH-mm-ss``

After substitution every character outside ``[A-Za-z0-9-]`` becomes a
hyphen, runs of hyphens collapse, the name is lowercased and the format
extension appended: ``email-signups-2024-01-02-03-04-05.csv``.
"""
from __future__ import annotations

import dataclasses
import re
from types import MappingProxyType
from typing import Any, Final, Mapping

from stream_export.application.export.conditions import conditions_to_string
from stream_export.kernel.errors import ConfigurationError
from stream_export.kernel.time import Clock, SystemClock
from stream_export.kernel.types import underscore

PLACEHOLDERS: Final = frozenset({"controllerName", "conditions", "dateTime"})
DATE_TIME_FORMAT: Final = "%Y-%m-%d-%H-%M-%S"

_PLACEHOLDER: Final = re.compile(r"%([A-Za-z_]+)%")
_UNSAFE: Final = re.compile(r"[^a-z0-9-]", re.IGNORECASE)
_HYPHEN_RUN: Final = re.compile(r"-{2,}")


def validate_file_name_format(template: str) -> None:
    """Raise :class:`ConfigurationError` for unknown ``%placeholder%`` tokens."""
    unknown = sorted(set(_PLACEHOLDER.findall(template)) - PLACEHOLDERS)
    if unknown:
        raise ConfigurationError(
            f"Unknown file name placeholder(s) {unknown} in {template!r}",
            setting="file_name_format",
        )


def sanitize_file_name(name: str) -> str:
    return _HYPHEN_RUN.sub("-", _UNSAFE.sub("-", name)).lower()


@dataclasses.dataclass(frozen=True)
class ResponseHeaders:
    file_name: str
    headers: Mapping[str, str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def as_list(self) -> list[tuple[bytes, bytes]]:
        """ASGI ``http.response.start`` header list."""
        return [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in self.headers.items()]


class ResponseHeaderBuilder:
    """Compute the attachment file name and download headers for a run."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()

    def file_name(self, template: str, primary_name: str, conditions: Any, format: str) -> str:  # noqa: A002
        validate_file_name_format(template)
        values: dict[str, Any] = {}

        def _substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in values:
                values[key] = self._placeholder(key, primary_name, conditions)
            return values[key]

        name = _PLACEHOLDER.sub(_substitute, template)
        return f"{sanitize_file_name(name)}.{format}"

    def _placeholder(self, key: str, primary_name: str, conditions: Any) -> str:
        if key == "controllerName":
            return underscore(primary_name)
        if key == "conditions":
            return conditions_to_string(conditions)
        return self._clock.now().strftime(DATE_TIME_FORMAT)

    def build(
        self,
        file_name_format: str,
        primary_name: str,
        conditions: Any,
        format: str,  # noqa: A002
        *,
        mime_type: str,
        char_encoding: str,
    ) -> ResponseHeaders:
        file_name = self.file_name(file_name_format, primary_name, conditions, format)
        headers = {
            "Content-Type": f'{mime_type}; charset="{char_encoding}"',
            "Content-Disposition": f'attachment; filename="{file_name}"',
            "Content-Transfer-Encoding": "binary",
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        }
        return ResponseHeaders(file_name=file_name, headers=headers)


__all__ = [
    "DATE_TIME_FORMAT",
    "PLACEHOLDERS",
    "ResponseHeaderBuilder",
    "ResponseHeaders",
    "sanitize_file_name",
    "validate_file_name_format",
]
