"""Build pipeline phases: load, validate, merge, filter, enrich, index."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from modelcat.domain.enrichment import enrich_model
from modelcat.domain.errors import FatalPipelineError, PipelineStage, SourceError
from modelcat.domain.merge import merge_record_sets
from modelcat.domain.model.catalog import Model, Provider
from modelcat.domain.model.records import RecordSet
from modelcat.domain.model.registry import ProviderRegistry, normalize_provider_id
from modelcat.domain.snapshot import Snapshot
from modelcat.domain.validation import Invalid, ModelSchema, ProviderSchema, RecordSchema, validate

if TYPE_CHECKING:
    from collections.abc import Iterable

    from modelcat.domain.model.records import Record
    from modelcat.domain.pipeline.context import CatalogBuild, PipelineContext

log = getLogger(__name__)


@dataclass(slots=True)
class LoadPhase:
    """Collect record sets from every source, skipping failed optional ones."""

    name: str = "load"

    def run(self, build: CatalogBuild, *, context: PipelineContext) -> None:
        for source in build.sources:
            try:
                record_set = source.load()
            except SourceError as exc:
                if source.name in context.required_sources:
                    raise
                context.counters.sources_failed += 1
                context.warn("Skipping source %s: %s", source.name, exc.message)
                continue
            context.counters.sources_loaded += 1
            log.debug(
                "Loaded %s providers and %s models from %s",
                len(record_set.providers),
                len(record_set.models),
                source.name,
            )
            build.record_sets.append(record_set)


@dataclass(slots=True)
class ValidatePhase:
    """Validate every record and normalise provider ids; drop what fails."""

    name: str = "validate"

    def run(self, build: CatalogBuild, *, context: PipelineContext) -> None:
        for record_set in build.record_sets:
            origin = record_set.origin
            providers = list(
                self._valid(record_set.providers, ProviderSchema, "provider", origin, context)
            )
            models = list(self._valid(record_set.models, ModelSchema, "model", origin, context))
            dropped_providers = len(record_set.providers) - len(providers)
            dropped_models = len(record_set.models) - len(models)
            context.counters.invalid_providers += dropped_providers
            context.counters.invalid_models += dropped_models
            if dropped_providers or dropped_models:
                context.warn(
                    "Dropped %s invalid providers and %s invalid models from %s",
                    dropped_providers,
                    dropped_models,
                    record_set.origin,
                )
            build.validated.append(
                RecordSet(providers=providers, models=models, origin=record_set.origin)
            )

    @staticmethod
    def _valid(
        records: Iterable[Record],
        schema: type[RecordSchema],
        kind: str,
        origin: str,
        context: PipelineContext,
    ) -> Iterable[Record]:
        id_field = "id" if schema is ProviderSchema else "provider"
        for raw in records:
            result = validate(schema, raw)
            if isinstance(result, Invalid):
                log.info("Invalid %s from %s: %s", kind, origin, "; ".join(result.reasons))
                continue
            record: dict[str, Any] = result.record
            provider_id = normalize_provider_id(record[id_field])
            if provider_id is None:
                log.info("Invalid provider id %r in %s from %s", record[id_field], kind, origin)
                continue
            record[id_field] = provider_id
            yield record


@dataclass(slots=True)
class MergePhase:
    """Merge validated record sets and register the resulting providers."""

    name: str = "merge"

    def run(self, build: CatalogBuild, *, context: PipelineContext) -> None:
        merged = merge_record_sets(build.validated)
        build.registry = ProviderRegistry(frozenset(merged.providers))

        for key in [key for key in merged.models if key[0] not in build.registry]:
            del merged.models[key]
            context.counters.orphaned_models += 1
            context.warn("Dropping model %s:%s with unregistered provider", *key)
        build.merged = merged


@dataclass(slots=True)
class FilterPhase:
    """Apply the compiled allow/deny filter; nothing visible is fatal."""

    name: str = "filter"

    def run(self, build: CatalogBuild, *, context: PipelineContext) -> None:
        merged = build.require_merged()
        compiled, warnings = context.filters.compile(build.registry.ids)
        context.counters.filter_warnings += len(warnings)
        context.warnings.extend(str(warning) for warning in warnings)
        build.filter = compiled

        build.visible_providers = [
            record
            for provider_id, record in merged.providers.items()
            if compiled.allows_provider(provider_id)
        ]
        for (provider_id, model_id), record in merged.models.items():
            if compiled(provider_id, model_id):
                build.visible_models.append(record)
            else:
                build.hidden_models.append(record)
        context.counters.filtered_models = len(build.hidden_models)

        if not build.visible_providers:
            raise FatalPipelineError(
                PipelineStage.FILTER, "no providers survived filtering", context.counters
            )
        if not build.visible_models:
            raise FatalPipelineError(
                PipelineStage.FILTER, "no models survived filtering", context.counters
            )


@dataclass(slots=True)
class EnrichPhase:
    """Apply defaults and derived fields, producing immutable values."""

    name: str = "enrich"

    def run(self, build: CatalogBuild, *, context: PipelineContext) -> None:
        overrides = context.family_overrides
        build.providers = [Provider.from_record(record) for record in build.visible_providers]
        build.models = [
            Model.from_record(enrich_model(record, family_overrides=overrides))
            for record in build.visible_models
        ]
        build.filtered_out = [
            Model.from_record(enrich_model(record, family_overrides=overrides))
            for record in build.hidden_models
        ]


@dataclass(slots=True)
class IndexPhase:
    """Build the indexes and assemble the snapshot."""

    name: str = "index"

    def run(self, build: CatalogBuild, *, context: PipelineContext) -> None:
        snapshot, collisions = Snapshot.build(
            build.providers,
            build.models,
            hidden_models=build.filtered_out,
            filter=build.filter,
            prefer=context.prefer,
            registry=build.registry,
        )
        context.counters.alias_collisions += len(collisions)
        context.warnings.extend(f"Dropped alias {collision}" for collision in collisions)
        build.snapshot = snapshot
