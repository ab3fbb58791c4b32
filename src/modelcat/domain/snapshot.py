"""One immutable generation of the catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import TYPE_CHECKING

from modelcat.domain.filters import ALLOW_ALL, CompiledFilter
from modelcat.domain.indexing import build_alias_index, build_indexes
from modelcat.domain.model.registry import ProviderRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from modelcat.domain.indexing import AliasCollision, CatalogIndexes
    from modelcat.domain.model.catalog import Model, Provider
    from modelcat.domain.model.records import ModelKey

_NO_ALIASES: Mapping[ModelKey, str] = MappingProxyType({})


@dataclass(frozen=True, slots=True, kw_only=True)
class Snapshot:
    """Providers, visible models and their lookup indexes.

    ``all_aliases_by_key`` covers every merged model, including the ones the
    filter hides, so that allow checks can resolve aliases of hidden models.
    """

    providers: tuple[Provider, ...]
    providers_by_id: Mapping[str, Provider]
    models_by_key: Mapping[ModelKey, Model]
    models_by_provider: Mapping[str, tuple[Model, ...]]
    aliases_by_key: Mapping[ModelKey, str]
    all_aliases_by_key: Mapping[ModelKey, str] = field(default=_NO_ALIASES)
    filter: CompiledFilter = ALLOW_ALL
    prefer: tuple[str, ...] = ()
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    registry: ProviderRegistry = field(default_factory=ProviderRegistry)

    @classmethod
    def from_indexes(
        cls,
        indexes: CatalogIndexes,
        *,
        all_aliases: Mapping[ModelKey, str] | None = None,
        filter: CompiledFilter = ALLOW_ALL,  # noqa: A002
        prefer: Sequence[str] = (),
        generated_at: datetime | None = None,
        registry: ProviderRegistry | None = None,
    ) -> Snapshot:
        return cls(
            providers=indexes.providers,
            providers_by_id=indexes.providers_by_id,
            models_by_key=indexes.models_by_key,
            models_by_provider=indexes.models_by_provider,
            aliases_by_key=indexes.aliases_by_key,
            all_aliases_by_key=MappingProxyType(
                dict(indexes.aliases_by_key if all_aliases is None else all_aliases)
            ),
            filter=filter,
            prefer=tuple(prefer),
            generated_at=generated_at or datetime.now(UTC),
            registry=registry or ProviderRegistry(frozenset(indexes.providers_by_id)),
        )

    @classmethod
    def build(
        cls,
        providers: Sequence[Provider],
        models: Sequence[Model],
        *,
        hidden_models: Sequence[Model] = (),
        filter: CompiledFilter = ALLOW_ALL,  # noqa: A002
        prefer: Sequence[str] = (),
        generated_at: datetime | None = None,
        registry: ProviderRegistry | None = None,
    ) -> tuple[Snapshot, list[AliasCollision]]:
        """Index ``models`` and wrap them in a snapshot.

        ``hidden_models`` are models removed by ``filter``; they only
        contribute to ``all_aliases_by_key``.
        """

        indexes, collisions = build_indexes(providers, models)
        all_aliases: Mapping[ModelKey, str] | None = None
        if hidden_models:
            all_aliases, _ = build_alias_index((*models, *hidden_models))
        snapshot = cls.from_indexes(
            indexes,
            all_aliases=all_aliases,
            filter=filter,
            prefer=prefer,
            generated_at=generated_at,
            registry=registry,
        )
        return snapshot, collisions

    @property
    def provider_ids(self) -> tuple[str, ...]:
        return tuple(provider.id for provider in self.providers)

    def iter_models(self) -> Iterator[Model]:
        for provider in self.providers:
            yield from self.models_by_provider.get(provider.id, ())

    def __len__(self) -> int:
        return len(self.models_by_key)

    def resolve(self, provider: str, model_id: str) -> ModelKey | None:
        """Return the canonical key for an id or alias of a visible model."""

        key = (provider, model_id)
        if key in self.models_by_key:
            return key
        canonical = self.aliases_by_key.get(key)
        return None if canonical is None else (provider, canonical)

    def resolve_any(self, provider: str, model_id: str) -> ModelKey:
        """Resolve an alias over every merged model, visible or not."""

        canonical = self.all_aliases_by_key.get((provider, model_id))
        return (provider, model_id if canonical is None else canonical)

    def model(self, provider: str, model_id: str) -> Model | None:
        key = self.resolve(provider, model_id)
        return None if key is None else self.models_by_key[key]
