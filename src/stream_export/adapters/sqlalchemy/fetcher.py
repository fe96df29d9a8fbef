"""SQLAlchemy adapter – SqlAlchemyChunkFetcher.

Translates :class:`QueryOptions` into one ``SELECT`` per page::

    SELECT email_signups.email AS "EmailSignup.email",
           sources.name        AS "Source.name"
    FROM email_signups LEFT OUTER JOIN sources ON sources.id = email_signups.source_id
    WHERE email_signups.optin = 1
    ORDER BY email_signups.id
    LIMIT 500 OFFSET 1000

Rows come back keyed by ``"Model.field"``. Models other than the primary one
are outer-joined on their foreign keys; ``joins`` entries give explicit
``{"table": "Source", "type": "inner", "on": <expression>}`` joins.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Sequence

import sqlalchemy as sa
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement, FromClause, Select

from stream_export.application.export.conditions import Condition, parse_conditions, parse_order
from stream_export.application.export.fetcher import Chunk
from stream_export.application.export.fields import FieldProjector
from stream_export.application.export.options import QueryOptions
from stream_export.kernel.errors import ConfigurationError

SessionFactory = Callable[[], AsyncSession]


def _as_table(target: Any) -> sa.Table:
    if isinstance(target, sa.Table):
        return target
    table = getattr(target, "__table__", None)
    if isinstance(table, sa.Table):
        return table
    raise ConfigurationError(f"Cannot export from {target!r}: not a Table or mapped class")


def _condition_clause(column: ColumnElement[Any], condition: Condition) -> ColumnElement[bool]:
    op, value = condition.operator, condition.value
    if op == "=":
        return column.is_(None) if value is None else column == value
    if op == "!=":
        return column.is_not(None) if value is None else column != value
    if op == "IN":
        return column.in_(list(value))
    if op == "NOT IN":
        return column.not_in(list(value))
    if op == "LIKE":
        return column.ilike(value)
    if op == "NOT LIKE":
        return column.not_ilike(value)
    if op == ">":
        return column > value
    if op == ">=":
        return column >= value
    if op == "<":
        return column < value
    return column <= value


class SqlAlchemyChunkFetcher:
    """:class:`ChunkFetcher` over SQLAlchemy Core tables or mapped classes.

    Args:
        session_factory: Zero-arg callable returning an ``AsyncSession``.
        model: Name of the primary model; must be a key of *models*.
        models: Model name → ``Table`` or declarative class.
    """

    def __init__(self, session_factory: SessionFactory, model: str, models: Mapping[str, Any]) -> None:
        if model not in models:
            raise ConfigurationError(f"Primary model {model!r} is not among {sorted(models)}")
        self._session_factory = session_factory
        self._model = model
        self._tables = {name: _as_table(target) for name, target in models.items()}
        self._projector = FieldProjector(model)

    @property
    def primary_table(self) -> sa.Table:
        return self._tables[self._model]

    def columns(self) -> Sequence[str]:
        return [c.name for c in self.primary_table.columns]

    def _column(self, name: str) -> ColumnElement[Any]:
        model, field = self._projector.split(name)
        table = self._tables.get(model)
        if table is None:
            raise ConfigurationError(f"Unknown model {model!r} in {name!r}", setting="fields")
        column = table.c.get(field)
        if column is None:
            raise ConfigurationError(f"Unknown field {field!r} on model {model!r}", setting="fields")
        return column

    def _from_clause(self, options: QueryOptions, referenced: Iterable[str]) -> FromClause:
        from_clause: FromClause = self.primary_table
        joined = {self._model}

        for entry in options.joins:
            if not isinstance(entry, Mapping) or "table" not in entry:
                raise ConfigurationError(f"Invalid join entry {entry!r}", setting="joins")
            name = entry["table"]
            table = self._tables.get(name)
            if table is None:
                raise ConfigurationError(f"Unknown model {name!r} in joins", setting="joins")
            how = str(entry.get("type", "left")).lower()
            if how not in ("left", "inner"):
                raise ConfigurationError(f"Unsupported join type {how!r}", setting="joins")
            from_clause = self._join(from_clause, table, entry.get("on"), outer=how == "left")
            joined.add(name)

        for name in [*options.contain, *referenced]:
            if name in joined:
                continue
            table = self._tables.get(name)
            if table is None:
                raise ConfigurationError(f"Unknown model {name!r} in contain", setting="contain")
            from_clause = self._join(from_clause, table, None, outer=True)
            joined.add(name)
        return from_clause

    @staticmethod
    def _join(left: FromClause, right: sa.Table, onclause: Any, *, outer: bool) -> FromClause:
        try:
            return left.join(right, onclause, isouter=outer)
        except sa_exc.ArgumentError as exc:
            raise ConfigurationError(f"Cannot join {right.name!r}: {exc}", setting="joins", cause=exc) from exc

    def build_query(self, options: QueryOptions) -> Select[Any]:
        """Compile *options* for the page in ``options.page`` into a ``SELECT``."""
        names = [self._projector.qualify(f) for f in options.fields or self.columns()]
        conditions, raw = parse_conditions(options.conditions)
        order = parse_order(options.order)

        referenced: list[str] = []
        for name in [*names, *(c.field for c in conditions), *(f for f, _ in order)]:
            model, _field = self._projector.split(name)
            if model != self._model and model not in referenced:
                referenced.append(model)

        stmt = sa.select(*[self._column(n).label(n) for n in names]).select_from(
            self._from_clause(options, referenced)
        )
        for condition in conditions:
            stmt = stmt.where(_condition_clause(self._column(condition.field), condition))
        for clause in raw:
            stmt = stmt.where(sa.text(clause) if isinstance(clause, str) else clause)

        if options.group:
            group = [options.group] if isinstance(options.group, str) else list(options.group)
            stmt = stmt.group_by(*[self._column(g) for g in group])

        if order:
            stmt = stmt.order_by(*[self._column(f).desc() if desc else self._column(f).asc() for f, desc in order])
        elif not options.group:
            # Pages are only disjoint under a total order.
            stmt = stmt.order_by(*self.primary_table.primary_key.columns)

        if options.limit:
            stmt = stmt.limit(options.limit)
        offset = options.effective_offset
        if offset:
            stmt = stmt.offset(offset)
        return stmt

    async def fetch_page(self, options: QueryOptions) -> Chunk:
        stmt = self.build_query(options)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]


__all__ = ["SessionFactory", "SqlAlchemyChunkFetcher"]
