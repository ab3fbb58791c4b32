"""Runtime query API over the current catalog snapshot.

Every query is answered from one snapshot reference taken at the start of the
call. Misses are returned as ``LookupMiss`` values; a catalog that has not
been loaded yet answers with empty lists, ``NOT_FOUND`` or ``NO_MATCH``.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from modelcat.adapters.inline import InlineSource
from modelcat.adapters.snapshot_file import decode_snapshot, parse_document
from modelcat.domain.errors import CatalogError
from modelcat.domain.filters import FilterSpec
from modelcat.domain.model.registry import normalize_provider_id
from modelcat.domain.pipeline import run_pipeline
from modelcat.domain.results import LookupMiss
from modelcat.domain.selection import select, select_first
from modelcat.domain.specs import parse_spec
from modelcat.domain.store import SnapshotStore

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from modelcat.domain.model.catalog import Model, Provider
    from modelcat.domain.model.records import ModelKey
    from modelcat.domain.ports.sources import Source
    from modelcat.domain.selection import Predicates
    from modelcat.domain.snapshot import Snapshot

log = getLogger(__name__)

_LOAD_OPTIONS_KEY = "load"


def _provider_key(provider: str) -> str:
    """Canonical form of a caller-supplied provider id; invalid ids pass through and miss."""

    return normalize_provider_id(provider) or provider


def _provider_keys(providers: Sequence[str] | None) -> list[str] | None:
    return None if providers is None else [_provider_key(provider) for provider in providers]


@dataclass(frozen=True, slots=True)
class LoadOptions:
    """Inputs of the last successful load, replayed by ``reload``."""

    sources: tuple[Source, ...]
    filters: FilterSpec
    prefer: tuple[str, ...]
    required_sources: frozenset[str]


class Catalog:
    def __init__(self, store: SnapshotStore[Snapshot] | None = None) -> None:
        self._store: SnapshotStore[Snapshot] = store or SnapshotStore()

    # Loading

    def load(
        self,
        sources: Sequence[Source],
        filters: FilterSpec | None = None,
        prefer: Iterable[str] = (),
        required_sources: Iterable[str] = (),
    ) -> int:
        """Build a snapshot from ``sources`` and make it current.

        Returns the new generation. Pipeline errors propagate and leave the
        current snapshot in place.
        """

        options = LoadOptions(
            sources=tuple(sources),
            filters=filters or FilterSpec(),
            prefer=tuple(_provider_key(provider) for provider in prefer),
            required_sources=frozenset(required_sources),
        )
        return self._load(options, options.sources)

    def load_snapshot(
        self,
        data: bytes | str,
        filters: FilterSpec | None = None,
        prefer: Iterable[str] = (),
    ) -> int:
        """Install a serialized snapshot document; ``reload`` rebuilds from it."""

        active_filters = filters or FilterSpec()
        snapshot = decode_snapshot(
            data, active_filters, [_provider_key(provider) for provider in prefer]
        )
        record_set = parse_document(data).to_record_set()
        source = InlineSource(
            {"providers": record_set.providers, "models": record_set.models}, name="snapshot"
        )
        options = LoadOptions(
            sources=(source,),
            filters=active_filters,
            prefer=snapshot.prefer,
            required_sources=frozenset(),
        )
        return self._put(snapshot, options)

    def reload(self, overrides: Mapping[str, Any] | None = None) -> int:
        """Rebuild from the last load, with ``overrides`` at highest precedence.

        Overrides apply to this build only; a later ``reload()`` without
        overrides goes back to the plain sources.
        """

        options = self.last_load_options()
        if options is None:
            raise CatalogError("Catalog has not been loaded; nothing to reload")
        sources = options.sources
        if overrides:
            sources = (*sources, InlineSource(overrides, name="overrides"))
        return self._load(options, sources)

    def clear(self) -> None:
        self._store.clear()

    def _load(self, options: LoadOptions, sources: Sequence[Source]) -> int:
        snapshot = run_pipeline(
            sources,
            options.filters,
            options.prefer,
            required_sources=options.required_sources,
        )
        return self._put(snapshot, options)

    def _put(self, snapshot: Snapshot, options: LoadOptions) -> int:
        generation = self._store.put(snapshot, {_LOAD_OPTIONS_KEY: options})
        log.info("Catalog generation %s is live (%s models)", generation, len(snapshot))
        return generation

    # State

    def snapshot(self) -> Snapshot | None:
        return self._store.snapshot()

    def current_generation(self) -> int:
        return self._store.generation()

    def last_load_options(self) -> LoadOptions | None:
        options = self._store.last_options()
        return None if options is None else options.get(_LOAD_OPTIONS_KEY)

    # Lookups

    def get(self, provider: str, model_id: str) -> Model | LookupMiss:
        snapshot = self._store.snapshot()
        model = None if snapshot is None else snapshot.model(_provider_key(provider), model_id)
        return LookupMiss.NOT_FOUND if model is None else model

    def parse(self, spec: str) -> ModelKey | LookupMiss:
        snapshot = self._store.snapshot()
        known: Iterable[str] = () if snapshot is None else snapshot.registry.ids
        return parse_spec(spec, frozenset(known))

    def get_spec(self, spec: str) -> Model | LookupMiss:
        parsed = self.parse(spec)
        if isinstance(parsed, LookupMiss):
            return parsed
        return self.get(*parsed)

    def models(self, provider: str | None = None) -> list[Model]:
        snapshot = self._store.snapshot()
        if snapshot is None:
            return []
        if provider is None:
            return list(snapshot.iter_models())
        return list(snapshot.models_by_provider.get(_provider_key(provider), ()))

    def providers(self) -> list[Provider]:
        snapshot = self._store.snapshot()
        if snapshot is None:
            return []
        return sorted(snapshot.providers, key=lambda provider: provider.id)

    def provider(self, provider_id: str) -> Provider | LookupMiss:
        snapshot = self._store.snapshot()
        key = _provider_key(provider_id)
        provider = None if snapshot is None else snapshot.providers_by_id.get(key)
        return LookupMiss.NOT_FOUND if provider is None else provider

    def capabilities(self, provider: str, model_id: str) -> Mapping[str, Any] | LookupMiss:
        model = self.get(provider, model_id)
        return model if isinstance(model, LookupMiss) else model.capabilities

    def is_allowed(self, provider: str, model_id: str) -> bool:
        """Whether the current filter admits ``provider:model_id`` (aliases resolved)."""

        snapshot = self._store.snapshot()
        if snapshot is None:
            return False
        return snapshot.filter(*snapshot.resolve_any(_provider_key(provider), model_id))

    # Selection

    def select(
        self,
        require: Predicates | None = None,
        forbid: Predicates | None = None,
        prefer: Sequence[str] | None = None,
        scope: str | None = None,
    ) -> list[ModelKey]:
        return select(
            self._store.snapshot(),
            require=require,
            forbid=forbid,
            prefer=_provider_keys(prefer),
            scope=None if scope is None else _provider_key(scope),
        )

    def select_first(
        self,
        require: Predicates | None = None,
        forbid: Predicates | None = None,
        prefer: Sequence[str] | None = None,
        scope: str | None = None,
    ) -> ModelKey | LookupMiss:
        return select_first(
            self._store.snapshot(),
            require=require,
            forbid=forbid,
            prefer=_provider_keys(prefer),
            scope=None if scope is None else _provider_key(scope),
        )


_default_catalog = Catalog()


def get_default_catalog() -> Catalog:
    """Process-wide catalog shared by callers that do not manage their own."""

    return _default_catalog
