"""Application export – QueryOptions and the QueryOptionsBuilder."""
from __future__ import annotations

import copy
import dataclasses
from typing import Any, Final, Mapping

from stream_export.application.export.config import ExportConfig
from stream_export.application.export.fields import FieldProjector
from stream_export.application.pagination import PaginationState
from stream_export.observability.logging import get_logger

RECOGNIZED_OPTIONS: Final = (
    "conditions", "fields", "joins", "limit", "offset", "order", "page", "group", "callbacks", "contain",
)

_log = get_logger(__name__)


@dataclasses.dataclass
class QueryOptions:
    """Find options for one export run; ``page`` is the run's cursor."""

    conditions: Any = None
    fields: list[str] | None = None
    joins: list[Any] = dataclasses.field(default_factory=list)
    limit: int | None = None
    offset: int | None = None
    order: Any = None
    page: int | None = None
    group: Any = None
    callbacks: bool = True
    contain: list[str] = dataclasses.field(default_factory=list)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "QueryOptions":
        """Keep recognised keys only; missing keys take their defaults."""
        values = {k: copy.deepcopy(v) for k, v in (raw or {}).items() if k in RECOGNIZED_OPTIONS}
        for key in ("joins", "contain"):
            if values.get(key) is None:
                values.pop(key, None)
            elif isinstance(values[key], str):
                values[key] = [values[key]]
            else:
                values[key] = list(values[key])
        if values.get("fields") is not None:
            fields = values["fields"]
            values["fields"] = [fields] if isinstance(fields, str) else list(fields)
        if values.get("callbacks") is None:
            values.pop("callbacks", None)
        return cls(**values)

    @property
    def effective_offset(self) -> int:
        """Row offset of the current page (``offset`` plus whole pages)."""
        offset = self.offset or 0
        if self.limit and self.page:
            offset += (self.page - 1) * self.limit
        return offset

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


class QueryOptionsBuilder:
    """Merge configured, inherited and derived find options for one run.

    When neither the configuration nor the inherited options set a limit,
    *default_limit* is used so that every run is paged.
    """

    def __init__(self, default_limit: int = 500) -> None:
        self._default_limit = default_limit

    def build(
        self,
        format: str,  # noqa: A002
        config: ExportConfig,
        pagination: PaginationState | None,
        primary_model: str,
    ) -> QueryOptions:
        if config.inherits_pagination:
            raw = pagination.for_model(primary_model) if pagination is not None else {}
        else:
            raw = config.find_options  # type: ignore[assignment]
        options = QueryOptions.from_mapping(raw)  # type: ignore[arg-type]

        # A listing's page size is too small for an export; the configured
        # chunk size replaces the limit and nothing else.
        if config.limit is not None:
            options.limit = config.limit
        elif not options.limit:
            options.limit = self._default_limit

        if not options.fields and config.fields:
            projector = FieldProjector(primary_model)
            options.fields = []
            for spec in config.fields:
                model, field = projector.split(spec.name)
                if model != primary_model and model not in options.contain:
                    options.contain.append(model)
                options.fields.append(f"{model}.{field}")

        # Export always walks the whole result set, whatever page the caller
        # was looking at.
        options.page = 1

        _log.debug(
            "export.options_built",
            format=format,
            model=primary_model,
            limit=options.limit,
            fields=options.fields,
            contain=options.contain,
        )
        return options


__all__ = ["RECOGNIZED_OPTIONS", "QueryOptions", "QueryOptionsBuilder"]
