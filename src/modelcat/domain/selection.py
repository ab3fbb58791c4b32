"""Capability-predicate selection over a snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

from modelcat.domain.model.capabilities import capability_matches
from modelcat.domain.results import LookupMiss

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from modelcat.domain.model.catalog import Model
    from modelcat.domain.model.records import ModelKey
    from modelcat.domain.snapshot import Snapshot

type Predicates = Mapping[str, Any] | Iterable[tuple[str, Any]]


def predicate_pairs(predicates: Predicates | None) -> tuple[tuple[str, Any], ...]:
    if predicates is None:
        return ()
    if isinstance(predicates, Mapping):
        return tuple(cast(Mapping[str, Any], predicates).items())
    return tuple(predicates)


def matches(
    model: Model, require: Predicates | None = None, forbid: Predicates | None = None
) -> bool:
    """Every ``require`` predicate holds and no ``forbid`` predicate does."""

    capabilities = model.capabilities
    for path, expected in predicate_pairs(require):
        if not capability_matches(capabilities, path, expected):
            return False
    return not any(
        capability_matches(capabilities, path, expected)
        for path, expected in predicate_pairs(forbid)
    )


def order_providers(provider_ids: Sequence[str], prefer: Sequence[str]) -> list[str]:
    """Preferred providers first, in ``prefer`` order; the rest keep their order."""

    present = set(provider_ids)
    preferred = [provider for provider in dict.fromkeys(prefer) if provider in present]
    chosen = set(preferred)
    return [*preferred, *(provider for provider in provider_ids if provider not in chosen)]


def select(
    snapshot: Snapshot | None,
    *,
    require: Predicates | None = None,
    forbid: Predicates | None = None,
    prefer: Sequence[str] | None = None,
    scope: str | None = None,
) -> list[ModelKey]:
    if snapshot is None:
        return []
    provider_ids: Sequence[str] = snapshot.provider_ids
    if scope is not None:
        provider_ids = [scope] if scope in snapshot.models_by_provider else []
    ordered = order_providers(provider_ids, snapshot.prefer if prefer is None else prefer)

    require_pairs = predicate_pairs(require)
    forbid_pairs = predicate_pairs(forbid)
    return [
        model.key
        for provider_id in ordered
        for model in snapshot.models_by_provider.get(provider_id, ())
        if matches(model, require_pairs, forbid_pairs)
    ]


def select_first(
    snapshot: Snapshot | None,
    *,
    require: Predicates | None = None,
    forbid: Predicates | None = None,
    prefer: Sequence[str] | None = None,
    scope: str | None = None,
) -> ModelKey | LookupMiss:
    keys = select(snapshot, require=require, forbid=forbid, prefer=prefer, scope=scope)
    return keys[0] if keys else LookupMiss.NO_MATCH
