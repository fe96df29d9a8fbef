"""Application pagination – PaginationState.

The listing a user was looking at (filters, ordering, page size) is handed
to the export explicitly, so an export "inherits" what is on screen without
reaching into the caller's internals.
"""
from __future__ import annotations

import dataclasses
from types import MappingProxyType
from typing import Any, Mapping

from stream_export.application.pagination.page_request import PageRequest
from stream_export.config.merge import deep_merge

# Option names that may legitimately hold a mapping at the root level; any
# other mapping-valued key is a per-model block.
_ROOT_MAPPING_OPTIONS = frozenset({"conditions", "order", "fields", "group", "contain", "joins"})


@dataclasses.dataclass(frozen=True)
class PaginationState:
    """Root find options plus optional per-model override blocks."""

    options: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    model_options: Mapping[str, Mapping[str, Any]] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))
        object.__setattr__(self, "model_options", MappingProxyType(dict(self.model_options)))

    def for_model(self, model: str) -> dict[str, Any]:
        """Root options with *model*'s block deep-merged on top."""
        return deep_merge(self.options, self.model_options.get(model))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "PaginationState":
        """Split a combined ``{"limit": 20, "EmailSignup": {...}}`` mapping."""
        options: dict[str, Any] = {}
        model_options: dict[str, Mapping[str, Any]] = {}
        for key, value in raw.items():
            if isinstance(value, Mapping) and key not in _ROOT_MAPPING_OPTIONS:
                model_options[key] = value
            else:
                options[key] = value
        return cls(options=options, model_options=model_options)

    @classmethod
    def from_page_request(cls, request: PageRequest, model: str | None = None) -> "PaginationState":
        options = request.to_find_options()
        if model is None:
            return cls(options=options)
        return cls(model_options={model: options})


__all__ = ["PaginationState"]
