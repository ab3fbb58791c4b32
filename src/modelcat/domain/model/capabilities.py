"""Dotted-path lookups into a model's capability tree."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast


def resolve_capability(capabilities: Mapping[str, Any], path: str) -> object | None:
    """Resolve ``path`` against ``capabilities``.

    ``tools`` resolves to ``tools.enabled`` when ``tools`` is a mapping, and a
    top-level ``json_native`` falls back to ``json.native`` when there is no
    ``json_native`` key. Returns ``None`` for a missing leaf.
    """

    value = _lookup(capabilities, path.split("."))
    if value is None and "." not in path and "_" in path and path not in capabilities:
        value = _lookup(capabilities, path.split("_", 1))
    if isinstance(value, Mapping):
        return cast(Mapping[str, Any], value).get("enabled")
    return value


def capability_matches(capabilities: Mapping[str, Any], path: str, expected: object) -> bool:
    value = resolve_capability(capabilities, path)
    if value is None:
        value = False
    if isinstance(expected, bool) and not isinstance(value, bool):
        return bool(value) is expected
    return value == expected


def _lookup(tree: Mapping[str, Any], segments: list[str]) -> object | None:
    current: object = tree
    for segment in segments:
        if not isinstance(current, Mapping):
            return None
        current = cast(Mapping[str, Any], current).get(segment)
        if current is None:
            return None
    return current
