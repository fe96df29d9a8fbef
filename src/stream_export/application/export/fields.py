"""Application export – field specs and the FieldProjector.

A field spec is parsed once, when configuration is loaded, from any of the
accepted raw shapes::

    fields = [
        "email",                                                # PlainField
        {"first_name": "First name(s)"},                        # LabeledField
        {"Source.name": {"label": "Where did you hear about us?"}},
        {"optin": {"decorator": "yes_no"}},                     # DecoratedField
    ]

A mapping of ``name -> None | label | options`` is accepted as well.
"""
from __future__ import annotations

import dataclasses
import re
from typing import Any, Final, Mapping, Sequence, Union

from stream_export.application.export.decorators import FieldDecorator
from stream_export.kernel.errors import ConfigurationError
from stream_export.kernel.types import humanize

_FIELD_NAME: Final = re.compile(r"^(?:[A-Za-z_][A-Za-z0-9_]*\.)?[A-Za-z_][A-Za-z0-9_]*$")
_OPTION_KEYS: Final = frozenset({"label", "decorator"})


@dataclasses.dataclass(frozen=True)
class PlainField:
    name: str


@dataclasses.dataclass(frozen=True)
class LabeledField:
    name: str
    label: str


@dataclasses.dataclass(frozen=True)
class DecoratedField:
    name: str
    label: str | None
    decorator: FieldDecorator


FieldSpec = Union[PlainField, LabeledField, DecoratedField]


@dataclasses.dataclass(frozen=True)
class ResolvedField:
    """One output column: where the value comes from and how it is labelled."""

    model: str
    field: str
    label: str
    decorator: FieldDecorator | None = None
    primary: bool = True

    @property
    def key(self) -> str:
        return f"{self.model}.{self.field}"

    def value(self, row: Mapping[str, Any]) -> Any:
        """Read this field from *row*, applying the decorator if any.

        Rows are keyed by qualified name; the primary model's fields may also
        be keyed by their bare name.
        """
        if self.key in row:
            value = row[self.key]
        elif self.primary:
            value = row.get(self.field)
        else:
            value = None
        if self.decorator is not None:
            value = self.decorator(value)
        return value


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not _FIELD_NAME.match(name):
        raise ConfigurationError(f"Invalid field name {name!r}", setting="fields")
    return name


def _parse_entry(name: Any, options: Any) -> FieldSpec:
    name = _check_name(name)
    if options is None:
        return PlainField(name)
    if isinstance(options, str):
        return LabeledField(name, options)
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"Invalid options for field {name!r}: {options!r}", setting="fields")

    unknown = set(options) - _OPTION_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unknown option(s) {sorted(unknown)} for field {name!r}", setting="fields"
        )
    label = options.get("label")
    if label is not None and not isinstance(label, str):
        raise ConfigurationError(f"Label for field {name!r} must be a string", setting="fields")
    if options.get("decorator") is not None:
        return DecoratedField(name, label, FieldDecorator.parse(options["decorator"]))
    if label is not None:
        return LabeledField(name, label)
    return PlainField(name)


def parse_field_spec(raw: Any) -> tuple[FieldSpec, ...] | None:
    """Normalise a raw ``fields`` setting into tagged field specs."""
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        return tuple(_parse_entry(name, opts) for name, opts in raw.items())
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ConfigurationError(f"Field spec must be a list or mapping, got {raw!r}", setting="fields")

    specs: list[FieldSpec] = []
    for entry in raw:
        if isinstance(entry, (PlainField, LabeledField, DecoratedField)):
            specs.append(entry)
        elif isinstance(entry, str):
            specs.append(PlainField(_check_name(entry)))
        elif isinstance(entry, Mapping):
            specs.extend(_parse_entry(name, opts) for name, opts in entry.items())
        else:
            raise ConfigurationError(f"Invalid field spec entry {entry!r}", setting="fields")
    return tuple(specs)


class FieldProjector:
    """Resolve field specs into ``(model, field, label, decorator)`` columns."""

    def __init__(self, primary_model: str) -> None:
        self._primary = primary_model

    def split(self, name: str) -> tuple[str, str]:
        """``"Source.name"`` → ``("Source", "name")``; bare names get the primary model."""
        model, _, field = name.rpartition(".")
        return (model or self._primary), field

    def qualify(self, name: str) -> str:
        model, field = self.split(name)
        return f"{model}.{field}"

    def resolve(
        self,
        spec: Sequence[FieldSpec] | None,
        columns: Sequence[str] = (),
    ) -> tuple[ResolvedField, ...]:
        """Project *spec*, or every column of the primary model when unset.

        Default labels are the humanised field name, prefixed with the
        humanised model name for other models (``Source Name``). Explicit
        labels are used verbatim, for other models too:
        ``{"Source.name": "Where did you hear about us?"}`` is not prefixed
        with ``Source``, unlike the default labels.
        """
        if not spec:
            spec = tuple(PlainField(c) for c in columns)

        resolved: list[ResolvedField] = []
        for entry in spec:
            model, field = self.split(entry.name)
            primary = model == self._primary
            label = getattr(entry, "label", None)
            if not label:
                label = humanize(field) if primary else f"{humanize(model)} {humanize(field)}"
            decorator = entry.decorator if isinstance(entry, DecoratedField) else None
            resolved.append(ResolvedField(model, field, label, decorator, primary))
        return tuple(resolved)


__all__ = [
    "DecoratedField",
    "FieldProjector",
    "FieldSpec",
    "LabeledField",
    "PlainField",
    "ResolvedField",
    "parse_field_spec",
]
