"""JSON value trees and the structural merges applied to them.

Parsed JSON is classified into three kinds -- object, array and scalar -- and
the merge rules are written against those kinds:

* object + object: recurse key by key, keys from the later value win
* anything else: the later value replaces the earlier one wholesale

Arrays are therefore replaced, never concatenated.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Iterable


class ValueKind(str, Enum):
    """The three shapes a JSON value can take for merging purposes."""
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


def kind_of(value: Any) -> ValueKind:
    """Classify a parsed JSON value."""
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, list):
        return ValueKind.ARRAY
    return ValueKind.SCALAR


def deep_merge(base: Any, override: Any) -> Any:
    """Merge *override* on top of *base*, returning a new value.

    Neither input is modified.
    """
    if kind_of(base) is ValueKind.OBJECT and kind_of(override) is ValueKind.OBJECT:
        merged = {key: _copy(value) for key, value in base.items()}
        for key, value in override.items():
            if key in merged:
                merged[key] = deep_merge(merged[key], value)
            else:
                merged[key] = _copy(value)
        return merged
    return _copy(override)


def deep_merge_all(values: Iterable[Any]) -> Any:
    """Fold :func:`deep_merge` over *values* in order, starting from ``{}``."""
    result: Any = {}
    for value in values:
        result = deep_merge(result, value)
    return result


def shallow_merge_all(objects: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Union of top-level keys, later objects replacing whole values."""
    result: dict[str, Any] = {}
    for obj in objects:
        for key, value in obj.items():
            result[key] = _copy(value)
    return result


def dump_json(value: Any) -> str:
    """Serialise with the stable two-space layout used for every merged file."""
    return json.dumps(value, indent=2, ensure_ascii=False)


def _copy(value: Any) -> Any:
    kind = kind_of(value)
    if kind is ValueKind.OBJECT:
        return {key: _copy(item) for key, item in value.items()}
    if kind is ValueKind.ARRAY:
        return [_copy(item) for item in value]
    return value
