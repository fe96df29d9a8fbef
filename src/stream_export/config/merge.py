"""Config – pure, order-sensitive recursive merge of key-value maps."""
from __future__ import annotations

import copy
from typing import Any, Mapping


def deep_merge(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge *layers* left to right; later layers win key-for-key.

    Nested mappings are merged recursively. Any other value (lists included)
    replaces the earlier one. ``None`` layers are skipped. Inputs are never
    mutated; the result holds deep copies of the merged values.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, Mapping) and isinstance(value, Mapping):
                merged[key] = deep_merge(current, value)
            else:
                merged[key] = copy.deepcopy(value)
    return merged


__all__ = ["deep_merge"]
