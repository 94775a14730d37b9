"""Merge helpers for layered settings.

A higher layer's list replaces the lower one unless its first item is a
marker:

- ``"+"``: append the remaining items to the lower layer's list
- ``"="``: replace with the remaining items
"""
from __future__ import annotations

from typing import Any, Dict, List


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``base`` updated recursively with ``override``; inputs are not mutated.

    >>> deep_merge({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
    {'a': 1, 'b': {'c': 2, 'd': 3}}
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = merge_arrays(current, value)
        else:
            merged[key] = value
    return merged


def merge_arrays(base: List[Any], override: List[Any]) -> List[Any]:
    """
    >>> merge_arrays(["a.props"], ["b.props"])
    ['b.props']
    >>> merge_arrays(["a.props"], ["+", "b.props"])
    ['a.props', 'b.props']
    """
    if override and override[0] == "+":
        return [*base, *override[1:]]
    if override and override[0] == "=":
        return list(override[1:])
    return list(override)


__all__ = ["deep_merge", "merge_arrays"]
