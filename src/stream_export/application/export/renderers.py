"""Application export – OutputRenderer port, CSV and Jinja2 template renderers."""
from __future__ import annotations

import codecs
import csv
import dataclasses
import io
from pathlib import Path
from typing import Any, Protocol, Sequence

import jinja2

from stream_export.application.export.fetcher import Chunk
from stream_export.application.export.fields import ResolvedField
from stream_export.application.export.sink import OutputSink
from stream_export.kernel.errors import RenderError
from stream_export.kernel.types import humanize

# Codecs that would emit a BOM on every encode() call are pinned to an
# explicit byte order; the BOM is written once, on the first page.
_OUTPUT_CODECS: dict[str, tuple[str, bytes]] = {
    "utf-8": ("utf-8", codecs.BOM_UTF8),
    "utf-8-sig": ("utf-8", codecs.BOM_UTF8),
    "utf-16": ("utf-16-le", codecs.BOM_UTF16_LE),
    "utf-16-le": ("utf-16-le", codecs.BOM_UTF16_LE),
    "utf-16-be": ("utf-16-be", codecs.BOM_UTF16_BE),
    "utf-32": ("utf-32-le", codecs.BOM_UTF32_LE),
    "utf-32-le": ("utf-32-le", codecs.BOM_UTF32_LE),
    "utf-32-be": ("utf-32-be", codecs.BOM_UTF32_BE),
}


def output_codec(encoding: str) -> tuple[str, bytes]:
    """Return ``(codec, bom)`` for *encoding*; non-Unicode charsets have no BOM."""
    name = codecs.lookup(encoding).name
    return _OUTPUT_CODECS.get(name, (name, b""))


class OutputRenderer(Protocol):
    """Port: format one chunk and write it to *sink*."""

    async def render(self, chunk: Chunk, is_first_page: bool, sink: OutputSink) -> None: ...


@dataclasses.dataclass(frozen=True)
class RenderContext:
    """Everything a renderer factory needs to build a renderer for one run."""

    fields: tuple[ResolvedField, ...]
    char_encoding: str
    source_encoding: str = "UTF-8"
    data_var_name: str = "rows"


class _EncodingRenderer:
    def __init__(self, char_encoding: str, source_encoding: str) -> None:
        self._codec, self._bom = output_codec(char_encoding)
        self._source_encoding = source_encoding

    def _encode(self, text: str, is_first_page: bool) -> bytes:
        try:
            data = text.encode(self._codec)
        except UnicodeError as exc:
            raise RenderError(f"Cannot encode export output as {self._codec}: {exc}", cause=exc) from exc
        return self._bom + data if is_first_page else data

    def _text(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (bytes, bytearray)):
            try:
                return bytes(value).decode(self._source_encoding)
            except UnicodeError as exc:
                raise RenderError(
                    f"Cannot decode source value as {self._source_encoding}: {exc}", cause=exc
                ) from exc
        return str(value)


class CsvRenderer(_EncodingRenderer):
    """Tab-separated, fully quoted rows with a label header on the first page.

    Every cell is wrapped in double quotes and embedded quotes are doubled,
    so ``y,"z"`` becomes ``"y,""z"`` followed by the closing quote.
    Embedded tabs are replaced by a space so every tab is a separator.
    """

    def __init__(
        self,
        fields: Sequence[ResolvedField],
        *,
        char_encoding: str = "UTF-16LE",
        source_encoding: str = "UTF-8",
    ) -> None:
        super().__init__(char_encoding, source_encoding)
        self._fields = tuple(fields)

    def _cell(self, value: Any) -> str:
        return self._text(value).replace("\t", " ")

    def _fields_for(self, chunk: Chunk) -> tuple[ResolvedField, ...]:
        if not self._fields and chunk:
            self._fields = tuple(
                ResolvedField(model="", field=key, label=humanize(key.rpartition(".")[2]))
                for key in chunk[0]
            )
        return self._fields

    async def render(self, chunk: Chunk, is_first_page: bool, sink: OutputSink) -> None:
        fields = self._fields_for(chunk)
        buf = io.StringIO()
        writer = csv.writer(buf, delimiter="\t", quoting=csv.QUOTE_ALL, doublequote=True, lineterminator="\n")
        if is_first_page and fields:
            writer.writerow([self._cell(f.label) for f in fields])
        for row in chunk:
            writer.writerow([self._cell(f.value(row)) for f in fields])
        await sink.write(self._encode(buf.getvalue(), is_first_page))


def template_environment(templates_dir: str | Path) -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(templates_dir)),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=jinja2.StrictUndefined,
    )


class TemplateRenderer(_EncodingRenderer):
    """Render a Jinja2 view once per chunk, optionally wrapped in a layout.

    The view sees the chunk under *data_var_name*, ``page1``, ``fields`` and
    ``char_encoding``; a layout additionally gets ``content_for_layout``.
    """

    def __init__(
        self,
        environment: jinja2.Environment,
        view_file: str,
        context: RenderContext,
        *,
        layout: str | None = None,
    ) -> None:
        super().__init__(context.char_encoding, context.source_encoding)
        self._env = environment
        self._view_file = view_file
        self._layout = layout
        self._context = context

    async def render(self, chunk: Chunk, is_first_page: bool, sink: OutputSink) -> None:
        binding: dict[str, Any] = {
            self._context.data_var_name: chunk,
            "page1": is_first_page,
            "fields": self._context.fields,
            "char_encoding": self._context.char_encoding,
        }
        try:
            content = self._env.get_template(self._view_file).render(**binding)
            if self._layout:
                content = self._env.get_template(self._layout).render(content_for_layout=content, **binding)
        except jinja2.TemplateError as exc:
            raise RenderError(f"Template {self._view_file!r} failed: {exc}", cause=exc) from exc
        await sink.write(self._encode(content, is_first_page))


def csv_renderer(context: RenderContext) -> CsvRenderer:
    return CsvRenderer(
        context.fields,
        char_encoding=context.char_encoding,
        source_encoding=context.source_encoding,
    )


__all__ = [
    "CsvRenderer",
    "OutputRenderer",
    "RenderContext",
    "TemplateRenderer",
    "csv_renderer",
    "output_codec",
    "template_environment",
]
