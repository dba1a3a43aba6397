"""Typed accessors for untyped TOML tables.

Config files arrive as ``dict[str, object]``; these helpers validate one key
at a time and return ``None`` when the value is missing or has the wrong type.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a non-empty, stripped string value."""
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_float(table: Mapping[str, object], key: str) -> float | None:
    """Get a number as float (bools are rejected)."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_str_list(table: Mapping[str, object], key: str) -> tuple[str, ...] | None:
    """Get a command line: either a list of strings or a single string split on spaces."""
    value = table.get(key)
    if isinstance(value, str):
        parts = tuple(value.split())
        return parts or None
    if not isinstance(value, list):
        return None
    items = cast(list[object], value)
    if not items or not all(isinstance(item, str) for item in items):
        return None
    return tuple(cast(list[str], items))
