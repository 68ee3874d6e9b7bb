"""Dictionary merge helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def deep_merge(base: Mapping[str, Any], *overrides: Mapping[str, Any]) -> dict[str, Any]:
    """
    Merge mappings left to right; later values win.

    Nested mappings are merged recursively, everything else (lists included)
    is replaced. Inputs are never mutated.
    """
    result: dict[str, Any] = dict(base)
    for override in overrides:
        for key, value in override.items():
            current = result.get(key)
            if isinstance(current, Mapping) and isinstance(value, Mapping):
                result[key] = deep_merge(current, value)
            else:
                result[key] = value
    return result
