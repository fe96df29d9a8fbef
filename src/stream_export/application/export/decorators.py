"""Application export – named value decorators applied before rendering.

Configured per field, e.g. ``{"optin": {"decorator": "yes_no"}}`` or
``{"created": {"decorator": ["date_format", "%B %d, %Y, %I:%M %p"]}}``.
"""
from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Any, Callable

from stream_export.kernel.errors import ConfigurationError

DecoratorFn = Callable[..., Any]


def yes_no(value: Any, yes: str = "Yes", no: str = "No") -> str:
    if isinstance(value, str):
        return yes if value.strip().lower() in ("1", "true", "yes", "y", "on") else no
    return yes if value else no


def date_format(value: Any, fmt: str = "%Y-%m-%d %H:%M:%S") -> Any:
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, (datetime, date)):
        return value.strftime(fmt)
    return value


def default(value: Any, fallback: str = "") -> Any:
    return fallback if value is None or value == "" else value


_REGISTRY: dict[str, DecoratorFn] = {
    "yes_no": yes_no,
    "date_format": date_format,
    "default": default,
}


def register_decorator(name: str, fn: DecoratorFn) -> None:
    """Make *fn* available to field specs under *name*."""
    _REGISTRY[name] = fn


@dataclasses.dataclass(frozen=True)
class FieldDecorator:
    """A decorator name, its extra arguments, and the function it resolved to."""

    name: str
    args: tuple[Any, ...] = ()
    fn: DecoratorFn = dataclasses.field(default=yes_no, compare=False, repr=False)

    def __call__(self, value: Any) -> Any:
        return self.fn(value, *self.args)

    @classmethod
    def parse(cls, raw: Any) -> "FieldDecorator":
        """Accept ``"name"``, ``["name", *args]`` or a bare callable."""
        if callable(raw):
            return cls(name=getattr(raw, "__name__", repr(raw)), fn=raw)
        if isinstance(raw, str):
            name, args = raw, ()
        elif isinstance(raw, (list, tuple)) and raw and isinstance(raw[0], str):
            name, args = raw[0], tuple(raw[1:])
        else:
            raise ConfigurationError(f"Invalid decorator specification {raw!r}", setting="fields")
        fn = _REGISTRY.get(name)
        if fn is None:
            raise ConfigurationError(f"Unknown decorator {name!r}", setting="fields")
        return cls(name=name, args=args, fn=fn)


__all__ = ["DecoratorFn", "FieldDecorator", "date_format", "default", "register_decorator", "yes_no"]
