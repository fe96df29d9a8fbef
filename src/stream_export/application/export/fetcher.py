"""Application export – ChunkFetcher port and an in-memory implementation."""
from __future__ import annotations

import functools
from typing import Any, Mapping, Protocol, Sequence

from stream_export.application.export.conditions import parse_conditions, parse_order
from stream_export.application.export.options import QueryOptions
from stream_export.kernel.errors import ConfigurationError

Row = Mapping[str, Any]
Chunk = list[Row]


class ChunkFetcher(Protocol):
    """Port: return one page of rows for the current ``options.page``.

    Implementations must not mutate *options*, must return at most
    ``options.limit`` rows ordered consistently with ``options.order``, and
    must eventually return an empty page for any finite result set.
    """

    async def fetch_page(self, options: QueryOptions) -> Chunk: ...

    def columns(self) -> Sequence[str]:
        """Column names of the primary model, used when no fields are configured."""
        ...


class InMemoryChunkFetcher:
    """Serve pages from a list of rows (tests, small pre-computed reports).

    Rows are keyed by bare field name for *model* and by ``"Model.field"`` for
    any other model. Parsed conditions, ``order`` and paging are honoured;
    backend-native clauses are rejected.
    """

    def __init__(self, model: str, rows: Sequence[Row], columns: Sequence[str] | None = None) -> None:
        self._model = model
        self._rows = list(rows)
        self._columns = list(columns) if columns is not None else list(self._rows[0]) if self._rows else []

    def columns(self) -> Sequence[str]:
        return list(self._columns)

    def _get(self, row: Row, name: str) -> Any:
        if name in row:
            return row[name]
        model, _, field = name.rpartition(".")
        if model in ("", self._model):
            return row.get(field)
        return None

    async def fetch_page(self, options: QueryOptions) -> Chunk:
        conditions, raw = parse_conditions(options.conditions)
        if raw:
            raise ConfigurationError("In-memory fetcher only supports mapping conditions", setting="conditions")

        rows = [r for r in self._rows if all(c.matches(self._get(r, c.field)) for c in conditions)]
        for field, descending in reversed(parse_order(options.order)):
            rows.sort(key=functools.partial(_sort_key, self._get, field), reverse=descending)

        start = options.effective_offset
        end = start + options.limit if options.limit else None
        return [dict(r) for r in rows[start:end]]


def _sort_key(getter: Any, field: str, row: Row) -> tuple[bool, Any]:
    value = getter(row, field)
    return (value is not None, value)


__all__ = ["Chunk", "ChunkFetcher", "InMemoryChunkFetcher", "Row"]
