"""Application pagination – PageRequest, Sort, SortDirection, Filter."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any

_OPERATORS = frozenset({"=", "!=", ">", ">=", "<", "<=", "LIKE", "IN"})


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclasses.dataclass(frozen=True)
class Sort:
    """Single sort criterion."""
    field: str
    direction: SortDirection = SortDirection.ASC

    def to_order(self) -> str:
        return f"{self.field} {self.direction.value}"


@dataclasses.dataclass(frozen=True)
class Filter:
    """Key/value filter applied to a listing query."""
    field: str
    operator: str
    value: object

    def __post_init__(self) -> None:
        if self.operator.upper() not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.operator!r}")

    def to_condition(self) -> tuple[str, Any]:
        op = self.operator.upper()
        key = self.field if op == "=" else f"{self.field} {op}"
        return key, self.value


@dataclasses.dataclass(frozen=True)
class PageRequest:
    """Offset-based pagination parameters of an on-screen listing."""
    page: int = 1
    size: int = 20
    sorts: tuple[Sort, ...] = ()
    filters: tuple[Filter, ...] = ()

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.size < 1 or self.size > 1000:
            raise ValueError("size must be between 1 and 1000")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size

    def to_find_options(self) -> dict[str, Any]:
        """Translate into the find-option mapping used by query builders."""
        options: dict[str, Any] = {"limit": self.size, "page": self.page}
        if self.sorts:
            options["order"] = [s.to_order() for s in self.sorts]
        if self.filters:
            options["conditions"] = dict(f.to_condition() for f in self.filters)
        return options


__all__ = ["Filter", "PageRequest", "Sort", "SortDirection"]
