"""Field-policy driven merging of records from several sources.

Sources are merged in the order given; later sources win for replaced and
deep-merged leaves while union fields accumulate values from every source.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from copy import deepcopy
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from modelcat.domain.model.records import Record

if TYPE_CHECKING:
    from collections.abc import Iterable

    from modelcat.domain.model.records import ModelKey, RecordSet

log = getLogger(__name__)


class MergeStrategy(StrEnum):
    REPLACE = "replace"
    UNION = "union"
    DEEP_MERGE = "deep_merge"


@dataclass(frozen=True, slots=True)
class FieldPolicy:
    """Merge strategy per dotted field path.

    Paths without an explicit strategy deep-merge when both sides are
    mappings and are replaced otherwise.
    """

    strategies: Mapping[str, MergeStrategy] = field(default_factory=dict[str, MergeStrategy])

    def strategy_for(self, path: str, existing: object, incoming: object) -> MergeStrategy:
        explicit = self.strategies.get(path)
        if explicit is not None:
            return explicit
        if isinstance(existing, Mapping) and isinstance(incoming, Mapping):
            return MergeStrategy.DEEP_MERGE
        return MergeStrategy.REPLACE


PROVIDER_POLICY = FieldPolicy(
    {
        "env": MergeStrategy.REPLACE,
        "extra": MergeStrategy.DEEP_MERGE,
    }
)

MODEL_POLICY = FieldPolicy(
    {
        "aliases": MergeStrategy.UNION,
        "modalities.input": MergeStrategy.UNION,
        "capabilities": MergeStrategy.DEEP_MERGE,
        "limits": MergeStrategy.DEEP_MERGE,
        "cost": MergeStrategy.DEEP_MERGE,
        "modalities": MergeStrategy.DEEP_MERGE,
        "extra": MergeStrategy.DEEP_MERGE,
    }
)


def merge(existing: Mapping[str, Any], incoming: Mapping[str, Any], policy: FieldPolicy) -> Record:
    """Return a new record combining ``incoming`` into ``existing``."""

    return _merge_at(existing, incoming, policy, prefix="")


def _merge_at(
    existing: Mapping[str, Any],
    incoming: Mapping[str, Any],
    policy: FieldPolicy,
    *,
    prefix: str,
) -> Record:
    merged: Record = deepcopy(dict(existing))
    for key, value in incoming.items():
        path = f"{prefix}{key}"
        if key not in merged:
            merged[key] = _normalized_value(value, policy, path)
            continue
        current = merged[key]
        match policy.strategy_for(path, current, value):
            case MergeStrategy.UNION:
                merged[key] = union(current, value)
            case MergeStrategy.DEEP_MERGE if isinstance(current, Mapping) and isinstance(
                value, Mapping
            ):
                merged[key] = _merge_at(
                    cast(Mapping[str, Any], current),
                    cast(Mapping[str, Any], value),
                    policy,
                    prefix=f"{path}.",
                )
            case _:
                merged[key] = deepcopy(value)
    return merged


def normalize_unions(
    record: Mapping[str, Any], policy: FieldPolicy, *, prefix: str = ""
) -> Record:
    """Copy of ``record`` with every union-policy list de-duplicated."""

    return {
        key: _normalized_value(value, policy, f"{prefix}{key}") for key, value in record.items()
    }


def _normalized_value(value: object, policy: FieldPolicy, path: str) -> Any:
    if policy.strategies.get(path) is MergeStrategy.UNION:
        return union(value, ())
    if isinstance(value, Mapping):
        return normalize_unions(cast(Mapping[str, Any], value), policy, prefix=f"{path}.")
    return deepcopy(value)


def union(existing: object, incoming: object) -> list[Any]:
    """Ordered, de-duplicated union of two list values."""

    result: list[Any] = []
    for item in (*_as_sequence(existing), *_as_sequence(incoming)):
        if item not in result:
            result.append(deepcopy(item))
    return result


def _as_sequence(value: object) -> Sequence[Any]:
    if value is None:
        return ()
    if isinstance(value, Sequence) and not isinstance(value, str):
        return cast(Sequence[Any], value)
    return (value,)


@dataclass(slots=True)
class MergedRecords:
    """Merged records keyed by provider id and by ``(provider, model id)``.

    Dict insertion order is the order in which each entity was first seen.
    """

    providers: dict[str, Record] = field(default_factory=dict[str, Record])
    models: dict[ModelKey, Record] = field(default_factory=dict["ModelKey", "Record"])

    def add_provider(self, record: Record, policy: FieldPolicy = PROVIDER_POLICY) -> None:
        provider_id = record["id"]
        existing = self.providers.get(provider_id)
        self.providers[provider_id] = (
            normalize_unions(record, policy)
            if existing is None
            else merge(existing, record, policy)
        )

    def add_model(self, record: Record, policy: FieldPolicy = MODEL_POLICY) -> None:
        key: ModelKey = (record["provider"], record["id"])
        existing = self.models.get(key)
        self.models[key] = (
            normalize_unions(record, policy)
            if existing is None
            else merge(existing, record, policy)
        )


def merge_record_sets(
    record_sets: Iterable[RecordSet],
    *,
    provider_policy: FieldPolicy = PROVIDER_POLICY,
    model_policy: FieldPolicy = MODEL_POLICY,
) -> MergedRecords:
    """Merge validated record sets in precedence order (last wins)."""

    merged = MergedRecords()
    for record_set in record_sets:
        for provider in record_set.providers:
            merged.add_provider(provider, provider_policy)
        for model in record_set.models:
            merged.add_model(model, model_policy)
        log.debug(
            "Merged %s providers and %s models from %s",
            len(record_set.providers),
            len(record_set.models),
            record_set.origin,
        )
    return merged
