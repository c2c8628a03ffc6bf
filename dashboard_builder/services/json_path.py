"""
Path Addressing

Minimal structural paths for reading and writing nested values:

    $                 whole value
    $.title           key "title"
    $.data.rows[2]    key "data", key "rows", index 2
    metadata.error    leading "$." is optional

Writes are copy-on-write: the input is deep-copied before assignment so
readers holding the previous value never observe the change.
"""

import copy
import re
from dataclasses import dataclass
from typing import Any

from dashboard_builder.core.exceptions import PathError

_SEGMENT_SPLIT = re.compile(r"[.\[\]]")


@dataclass
class PathLocation:
    """Result of navigating a path."""

    parent: Any
    key: str | int
    exists: bool
    value: Any = None


def parse_path(path: str | None) -> list[str]:
    """Split a path into raw segments. `$` and empty give []."""
    if not path or path == "$":
        return []
    if path.startswith("$."):
        path = path[2:]
    elif path.startswith("$"):
        path = path[1:]
    return [part for part in _SEGMENT_SPLIT.split(path) if part != ""]


def _as_index(part: str) -> int | None:
    if part.lstrip("-").isdigit():
        return int(part)
    return None


def navigate(obj: Any, path: str | None) -> PathLocation:
    """
    Walk `path` through `obj`.

    Never raises: a missing or null intermediate gives exists=False.
    """
    parts = parse_path(path)
    if not parts:
        return PathLocation(parent=None, key="", exists=True, value=obj)

    current = obj
    parent: Any = None
    key: str | int = ""

    for i, part in enumerate(parts):
        last = i == len(parts) - 1
        parent = current
        index = _as_index(part)

        if index is not None and isinstance(current, list):
            key = index
            in_range = 0 <= index < len(current)
            value = current[index] if in_range else None
            if last:
                return PathLocation(parent=parent, key=key, exists=in_range, value=value)
            current = value
        else:
            key = part
            is_mapping = isinstance(current, dict)
            value = current.get(part) if is_mapping else None
            if last:
                return PathLocation(
                    parent=parent,
                    key=key,
                    exists=is_mapping and part in current,
                    value=value,
                )
            current = value

        if current is None:
            return PathLocation(parent=parent, key=key, exists=False)

    return PathLocation(parent=parent, key=key, exists=False)


def get_value_at_path(obj: Any, path: str | None, default: Any = None) -> Any:
    location = navigate(obj, path)
    return location.value if location.exists else default


def set_value_at_path(obj: Any, path: str | None, value: Any) -> Any:
    """
    Return a deep copy of `obj` with `value` written at `path`.

    `$` or an empty path replaces the whole value. Writing one past the
    end of a list appends.

    Raises:
        PathError: An intermediate segment is missing or not a container
    """
    parts = parse_path(path)
    if not parts:
        return copy.deepcopy(value)

    result = copy.deepcopy(obj)
    parent_path = "$." + ".".join(parts[:-1]) if len(parts) > 1 else "$"
    container = navigate(result, parent_path)
    if not container.exists or container.value is None:
        raise PathError(f"Path '{path}' does not exist: missing parent '{parent_path}'")

    target = container.value
    last = parts[-1]
    index = _as_index(last)

    if isinstance(target, list):
        if index is None:
            raise PathError(f"Path '{path}': '{last}' is not a valid list index")
        if 0 <= index < len(target):
            target[index] = copy.deepcopy(value)
        elif index == len(target):
            target.append(copy.deepcopy(value))
        else:
            raise PathError(
                f"Path '{path}': index {index} out of range for list of length {len(target)}"
            )
    elif isinstance(target, dict):
        target[last] = copy.deepcopy(value)
    else:
        raise PathError(
            f"Path '{path}': cannot set '{last}' on a {type(target).__name__} value"
        )

    return result
