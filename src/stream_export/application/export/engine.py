"""Application export – StreamingExportEngine.

The engine drives fetch → render → flush until the source is exhausted::

    page 1: fetch → render(first=True) → flush     (even when empty)
    page 2: fetch → render(first=False) → flush
    ...
    page N: fetch returns [] → stop

An empty first page is rendered once (header / BOM only) and ends the run.
Only one chunk is held at a time, so memory use depends on the chunk size,
not on the size of the result set. Chunk N is flushed before chunk N+1 is
fetched. Nothing is retried: a failing fetch or render aborts the stream
and whatever was already flushed stays with the client.
"""
from __future__ import annotations

import dataclasses
from typing import Any, Sequence

from stream_export.application.export.fetcher import Chunk, ChunkFetcher
from stream_export.application.export.options import QueryOptions
from stream_export.application.export.renderers import OutputRenderer
from stream_export.application.export.sink import OutputSink
from stream_export.kernel.errors import BaseError, FetchError, RenderError
from stream_export.observability.logging import get_logger, silence_sql_echo


@dataclasses.dataclass(frozen=True)
class ExportResult:
    """Terminal state of a finished run; the caller ends the response."""

    fetches: int
    pages: int
    rows: int


class StreamingExportEngine:
    """Run the paged export loop against a fetcher, renderer and sink."""

    def __init__(self, *, logger: Any = None) -> None:
        self._log = logger or get_logger(__name__)

    async def run(
        self,
        fetcher: ChunkFetcher,
        renderer: OutputRenderer,
        options: QueryOptions,
        sink: OutputSink,
    ) -> ExportResult:
        """Stream every page of *fetcher*; ``options.page`` is advanced in place.

        There is no iteration cap. The fetcher must eventually return an empty
        page for increasing page numbers.
        """
        if options.page is None:
            options.page = 1
        fetches = pages = rows = 0

        while True:
            chunk = await self._fetch(fetcher, options)
            fetches += 1
            if not chunk and options.page != 1:
                break

            await self._render(renderer, chunk, options.page == 1, sink, options.page)
            await sink.flush()
            pages += 1
            rows += len(chunk)
            self._log.debug("export.page_rendered", page=options.page, rows=len(chunk))
            if not chunk:
                break

            options.page += 1

        return self._finish(fetches, pages, rows)

    async def run_data(self, data: Sequence[Any], renderer: OutputRenderer, sink: OutputSink) -> ExportResult:
        """Render caller-supplied rows once, as the first and only page."""
        chunk: Chunk = list(data)
        await self._render(renderer, chunk, True, sink, 1)
        await sink.flush()
        return self._finish(0, 1, len(chunk))

    async def _fetch(self, fetcher: ChunkFetcher, options: QueryOptions) -> Chunk:
        try:
            return list(await fetcher.fetch_page(options))
        except BaseError as exc:
            self._log.error("export.failed", stage="fetch", page=options.page, error=exc.code)
            raise
        except Exception as exc:
            self._log.error("export.failed", stage="fetch", page=options.page, error=repr(exc))
            raise FetchError(f"Fetching page {options.page} failed: {exc}", page=options.page, cause=exc) from exc

    async def _render(
        self,
        renderer: OutputRenderer,
        chunk: Chunk,
        is_first_page: bool,
        sink: OutputSink,
        page: int,
    ) -> None:
        try:
            await renderer.render(chunk, is_first_page, sink)
        except BaseError as exc:
            self._log.error("export.failed", stage="render", page=page, error=exc.code)
            raise
        except Exception as exc:
            self._log.error("export.failed", stage="render", page=page, error=repr(exc))
            raise RenderError(f"Rendering page {page} failed: {exc}", page=page, cause=exc) from exc

    def _finish(self, fetches: int, pages: int, rows: int) -> ExportResult:
        silence_sql_echo()
        self._log.info("export.completed", fetches=fetches, pages=pages, rows=rows)
        return ExportResult(fetches=fetches, pages=pages, rows=rows)


__all__ = ["ExportResult", "StreamingExportEngine"]
