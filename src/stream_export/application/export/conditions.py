"""Application export – find-condition parsing shared by fetchers and file names.

Conditions are a mapping of ``"Model.field [operator]"`` to a value::

    {"EmailSignup.optin": True, "created >": "2010-01-01", "source_id": [1, 2]}

A list may mix such mappings with backend-native clauses (e.g. SQLAlchemy
expressions), which are passed through untouched.
"""
from __future__ import annotations

import dataclasses
import re
from typing import Any, Iterable, Mapping

from stream_export.kernel.errors import ConfigurationError

_OPERATOR_ALIASES = {"<>": "!=", "==": "="}
OPERATORS = frozenset({"=", "!=", ">", ">=", "<", "<=", "LIKE", "NOT LIKE", "IN", "NOT IN"})


@dataclasses.dataclass(frozen=True)
class Condition:
    field: str
    operator: str
    value: Any

    def matches(self, candidate: Any) -> bool:
        """Evaluate against a plain Python value (in-memory sources)."""
        op = self.operator
        if op == "=":
            return candidate == self.value
        if op == "!=":
            return candidate != self.value
        if op in ("IN", "NOT IN"):
            found = candidate in tuple(self.value)
            return found if op == "IN" else not found
        if op in ("LIKE", "NOT LIKE"):
            found = candidate is not None and like_pattern(str(self.value)).fullmatch(str(candidate)) is not None
            return found if op == "LIKE" else not found
        if candidate is None:
            return False
        if op == ">":
            return candidate > self.value
        if op == ">=":
            return candidate >= self.value
        if op == "<":
            return candidate < self.value
        return candidate <= self.value

    def __str__(self) -> str:
        value = self.value
        if isinstance(value, (list, tuple, set, frozenset)):
            value = ",".join(str(v) for v in value)
        return f"{self.field} {self.operator} {value}"


def like_pattern(pattern: str) -> re.Pattern[str]:
    """Translate a SQL ``LIKE`` pattern into a case-insensitive regex."""
    parts = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def parse_condition(key: str, value: Any) -> Condition:
    field, _, operator = key.strip().partition(" ")
    operator = " ".join(operator.upper().split())
    operator = _OPERATOR_ALIASES.get(operator, operator)
    if not operator:
        operator = "IN" if isinstance(value, (list, tuple, set, frozenset)) else "="
    if not field or operator not in OPERATORS:
        raise ConfigurationError(f"Invalid condition key {key!r}", setting="conditions")
    return Condition(field=field, operator=operator, value=value)


def parse_conditions(conditions: Any) -> tuple[list[Condition], list[Any]]:
    """Split *conditions* into parsed :class:`Condition` objects and raw clauses."""
    parsed: list[Condition] = []
    raw: list[Any] = []
    if conditions is None:
        return parsed, raw
    items: Iterable[Any] = [conditions] if isinstance(conditions, Mapping) else conditions
    if isinstance(items, (str, bytes)):
        items = [items]
    for item in items:
        if isinstance(item, Mapping):
            parsed.extend(parse_condition(str(k), v) for k, v in item.items())
        else:
            raw.append(item)
    return parsed, raw


def conditions_to_string(conditions: Any) -> str:
    """Best-effort, deterministic, human-readable rendering of *conditions*."""
    parsed, raw = parse_conditions(conditions)
    return "-".join([str(c) for c in parsed] + [str(clause) for clause in raw])


def parse_order(order: Any) -> list[tuple[str, bool]]:
    """Return ``(field, descending)`` pairs from str / list / mapping order specs."""
    if not order:
        return []
    if isinstance(order, Mapping):
        items = [f"{field} {direction}" for field, direction in order.items()]
    elif isinstance(order, str):
        items = order.split(",")
    else:
        items = list(order)

    result: list[tuple[str, bool]] = []
    for item in items:
        field, _, direction = str(item).strip().partition(" ")
        direction = direction.strip().upper() or "ASC"
        if not field or direction not in ("ASC", "DESC"):
            raise ConfigurationError(f"Invalid order clause {item!r}", setting="order")
        result.append((field, direction == "DESC"))
    return result


__all__ = [
    "OPERATORS",
    "Condition",
    "conditions_to_string",
    "like_pattern",
    "parse_condition",
    "parse_conditions",
    "parse_order",
]
