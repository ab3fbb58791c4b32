"""Canonical record sets as produced by sources.

A record is a plain ``dict`` keyed by field name. Sources hand the pipeline a
``RecordSet`` of provider records and model records; everything downstream of
validation works on copies.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, cast

type Record = dict[str, Any]
type ModelKey = tuple[str, str]

_RESERVED_TOP_LEVEL_KEYS = frozenset({"providers", "models", "exclude"})


@dataclass(slots=True)
class RecordSet:
    """Provider and model records contributed by one origin."""

    providers: list[Record] = field(default_factory=list[Record])
    models: list[Record] = field(default_factory=list[Record])
    origin: str = "unknown"

    def __len__(self) -> int:
        return len(self.providers) + len(self.models)

    def is_empty(self) -> bool:
        return not self.providers and not self.models

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, origin: str = "inline") -> RecordSet:
        """Build a record set from either accepted mapping shape.

        ``{"providers": [...], "models": [...]}`` lists records directly.
        ``{"openai": {"name": ..., "models": [...]}}`` nests models under the
        provider that owns them. In the first shape, models referencing a
        provider without its own entry get a bare ``{"id": ...}`` provider so
        overrides can target models alone.
        """

        if "providers" in data or "models" in data:
            return cls._from_flat(data, origin=origin)
        return cls._from_provider_keyed(data, origin=origin)

    @classmethod
    def _from_flat(cls, data: Mapping[str, Any], *, origin: str) -> RecordSet:
        providers = [dict(record) for record in _records(data.get("providers"), key_field="id")]
        models = [dict(record) for record in _records(data.get("models"), key_field="id")]

        seen = {record.get("id") for record in providers}
        for model in models:
            provider_id = model.get("provider")
            if isinstance(provider_id, str) and provider_id not in seen:
                providers.append({"id": provider_id})
                seen.add(provider_id)
        return cls(providers=providers, models=models, origin=origin)

    @classmethod
    def _from_provider_keyed(cls, data: Mapping[str, Any], *, origin: str) -> RecordSet:
        providers: list[Record] = []
        models: list[Record] = []
        for provider_id, raw in data.items():
            if provider_id in _RESERVED_TOP_LEVEL_KEYS or not isinstance(raw, Mapping):
                continue
            provider = dict(cast(Mapping[str, Any], raw))
            nested = provider.pop("models", None)
            provider.setdefault("id", provider_id)
            providers.append(provider)
            for model in _records(nested, key_field="id"):
                models.append({**model, "provider": provider["id"]})
        return cls(providers=providers, models=models, origin=origin)


def _records(value: object, *, key_field: str) -> list[Record]:
    """Normalise a list of records or an ``id -> record`` mapping to a list."""

    if value is None:
        return []
    if isinstance(value, Mapping):
        mapping = cast(Mapping[str, Any], value)
        return [
            {key_field: key, **cast(Mapping[str, Any], record)}
            for key, record in mapping.items()
            if isinstance(record, Mapping)
        ]
    if isinstance(value, Sequence) and not isinstance(value, str):
        items = cast(Sequence[Any], value)
        return [dict(cast(Mapping[str, Any], item)) for item in items if isinstance(item, Mapping)]
    return []
