"""Application export – registry of supported export formats."""
from __future__ import annotations

import dataclasses
from typing import Callable, Iterator

from stream_export.application.export.renderers import OutputRenderer, RenderContext, csv_renderer
from stream_export.kernel.errors import UnsupportedFormatError

RendererFactory = Callable[[RenderContext], OutputRenderer]


@dataclasses.dataclass(frozen=True)
class FormatSpec:
    """A format name (also the file extension), its MIME type and renderer."""

    name: str
    mime_type: str
    renderer_factory: RendererFactory


class FormatRegistry:
    """Lookup table of the formats an export may be requested in."""

    def __init__(self, *specs: FormatSpec) -> None:
        self._specs: dict[str, FormatSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: FormatSpec) -> None:
        self._specs[spec.name.lower()] = spec

    def supports(self, format: str | None) -> bool:  # noqa: A002
        return bool(format) and format.lower() in self._specs  # type: ignore[union-attr]

    def get(self, format: str | None) -> FormatSpec:  # noqa: A002
        if not self.supports(format):
            raise UnsupportedFormatError(str(format))
        return self._specs[format.lower()]  # type: ignore[union-attr]

    def names(self) -> list[str]:
        return list(self._specs)

    def __iter__(self) -> Iterator[FormatSpec]:
        return iter(self._specs.values())


CSV = FormatSpec(name="csv", mime_type="application/csv", renderer_factory=csv_renderer)


def default_registry() -> FormatRegistry:
    return FormatRegistry(CSV)


__all__ = ["CSV", "FormatRegistry", "FormatSpec", "RendererFactory", "default_registry"]
