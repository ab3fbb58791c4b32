"""Lookup structures built from the enriched, filtered models."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from modelcat.domain.model.catalog import Model, Provider
    from modelcat.domain.model.records import ModelKey

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AliasCollision:
    provider: str
    alias: str
    model_ids: tuple[str, ...]
    reason: str

    def __str__(self) -> str:
        claimants = ", ".join(self.model_ids)
        return f"{self.provider}:{self.alias} ({self.reason}; claimed by {claimants})"


@dataclass(frozen=True, slots=True)
class CatalogIndexes:
    providers: tuple[Provider, ...]
    providers_by_id: Mapping[str, Provider]
    models_by_key: Mapping[ModelKey, Model]
    models_by_provider: Mapping[str, tuple[Model, ...]]
    aliases_by_key: Mapping[ModelKey, str]


def build_alias_index(models: Iterable[Model]) -> tuple[dict[ModelKey, str], list[AliasCollision]]:
    """Map ``(provider, alias)`` to the canonical model id.

    An alias equal to another model's id, or claimed by more than one model of
    the same provider, is dropped for every claimant.
    """

    canonical: set[ModelKey] = set()
    claims: dict[ModelKey, list[str]] = defaultdict(list)
    for model in models:
        canonical.add(model.key)
        for alias in model.aliases:
            if alias != model.id and model.id not in claims[(model.provider, alias)]:
                claims[(model.provider, alias)].append(model.id)

    index: dict[ModelKey, str] = {}
    collisions: list[AliasCollision] = []
    for (provider, alias), model_ids in claims.items():
        if (provider, alias) in canonical:
            collisions.append(
                AliasCollision(provider, alias, tuple(model_ids), "collides with a canonical id")
            )
        elif len(model_ids) > 1:
            collisions.append(
                AliasCollision(provider, alias, tuple(model_ids), "claimed by several models")
            )
        else:
            index[(provider, alias)] = model_ids[0]
    return index, collisions


def build_indexes(
    providers: Sequence[Provider], models: Sequence[Model]
) -> tuple[CatalogIndexes, list[AliasCollision]]:
    """Build every runtime index; models lose aliases that collided."""

    alias_index, collisions = build_alias_index(models)
    for collision in collisions:
        log.warning("Dropping alias %s", collision)

    kept_aliases: dict[ModelKey, list[str]] = defaultdict(list)
    for (provider, alias), model_id in alias_index.items():
        kept_aliases[(provider, model_id)].append(alias)

    models_by_key: dict[ModelKey, Model] = {}
    grouped: dict[str, list[Model]] = {provider.id: [] for provider in providers}
    for model in models:
        aliases = tuple(alias for alias in model.aliases if alias in kept_aliases[model.key])
        if aliases != model.aliases:
            model = replace(model, aliases=aliases)
        models_by_key[model.key] = model
        grouped.setdefault(model.provider, []).append(model)

    indexes = CatalogIndexes(
        providers=tuple(providers),
        providers_by_id=MappingProxyType({provider.id: provider for provider in providers}),
        models_by_key=MappingProxyType(models_by_key),
        models_by_provider=MappingProxyType(
            {provider_id: tuple(group) for provider_id, group in grouped.items()}
        ),
        aliases_by_key=MappingProxyType(alias_index),
    )
    return indexes, collisions
