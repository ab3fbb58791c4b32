"""Derived fields and defaults applied to merged model records."""

from __future__ import annotations

import re
from collections.abc import Mapping
from copy import deepcopy
from typing import TYPE_CHECKING, Any, Final, cast

if TYPE_CHECKING:
    from modelcat.domain.model.records import Record

DEFAULT_CAPABILITIES: Final[Mapping[str, Any]] = {
    "chat": False,
    "embeddings": False,
    "reasoning": {"enabled": False},
    "tools": {"enabled": False, "streaming": False, "strict": False, "parallel": False},
    "json": {"native": False, "schema": False, "strict": False},
    "streaming": {"text": False, "tool_calls": False},
}

_DATE_SUFFIX = re.compile(r"-\d{4}-\d{2}-\d{2}$")
_COMPACT_DATE = re.compile(r"\d{8}")
_RELEASE_TAGS: Final[frozenset[str]] = frozenset({"latest", "preview"})


def apply_capability_defaults(
    capabilities: Mapping[str, Any] | None,
    defaults: Mapping[str, Any] = DEFAULT_CAPABILITIES,
) -> dict[str, Any]:
    """Fill every omitted capability leaf from ``defaults``.

    Explicit values are never overwritten. A boolean given where the default
    is a nested group, e.g. ``tools = true``, is read as that group's
    ``enabled`` flag.
    """

    result: dict[str, Any] = deepcopy(dict(capabilities or {}))
    for key, default in defaults.items():
        value = result.get(key)
        if isinstance(default, Mapping):
            group = cast(Mapping[str, Any], default)
            if value is None:
                result[key] = deepcopy(dict(group))
            elif isinstance(value, Mapping):
                result[key] = apply_capability_defaults(cast(Mapping[str, Any], value), group)
            elif isinstance(value, bool):
                result[key] = {**deepcopy(dict(group)), "enabled": value}
        elif value is None:
            result[key] = default
    return result


def derive_family(model_id: str, overrides: Mapping[str, str] | None = None) -> str | None:
    """Best-effort family name for ``model_id``.

    ``openai/gpt-4o-mini-2024-07-18`` becomes ``gpt-4o``: the vendor prefix,
    release date and ``latest``/``preview`` tags are dropped, then the last
    dash segment. A single remaining segment is its own family.
    """

    if overrides and model_id in overrides:
        return overrides[model_id]

    base = _DATE_SUFFIX.sub("", model_id.rsplit("/", 1)[-1])
    segments = [segment for segment in base.split("-") if segment]
    while len(segments) > 1 and (
        segments[-1] in _RELEASE_TAGS or _COMPACT_DATE.fullmatch(segments[-1])
    ):
        segments.pop()
    if len(segments) > 1:
        segments.pop()
    return "-".join(segments) or None


def enrich_model(record: Record, *, family_overrides: Mapping[str, str] | None = None) -> Record:
    """Project a merged model record to its served form."""

    enriched = deepcopy(record)
    model_id = enriched["id"]
    enriched["capabilities"] = apply_capability_defaults(enriched.get("capabilities"))
    if not enriched.get("family"):
        family = derive_family(model_id, family_overrides)
        if family is not None:
            enriched["family"] = family
    if not enriched.get("provider_model_id"):
        enriched["provider_model_id"] = model_id
    aliases = dict.fromkeys(enriched.get("aliases") or ())
    enriched["aliases"] = [alias for alias in aliases if alias and alias != model_id]
    enriched.setdefault("deprecated", False)
    return enriched
