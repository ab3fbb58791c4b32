"""Shared state passed between build pipeline phases."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.domain.filters import ALLOW_ALL, CompiledFilter, FilterSpec
from modelcat.domain.model.registry import ProviderRegistry

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from modelcat.domain.merge import MergedRecords
    from modelcat.domain.model.catalog import Model, Provider
    from modelcat.domain.model.records import Record, RecordSet
    from modelcat.domain.ports.sources import Source
    from modelcat.domain.snapshot import Snapshot

log = getLogger(__name__)


@dataclass(slots=True)
class PipelineCounters:
    sources_loaded: int = 0
    sources_failed: int = 0
    invalid_providers: int = 0
    invalid_models: int = 0
    orphaned_models: int = 0
    filtered_models: int = 0
    alias_collisions: int = 0
    filter_warnings: int = 0

    @property
    def dropped_invalid(self) -> int:
        return self.invalid_providers + self.invalid_models


@dataclass(slots=True)
class PipelineContext:
    """Options and bookkeeping for one pipeline run."""

    filters: FilterSpec = field(default_factory=FilterSpec)
    prefer: tuple[str, ...] = ()
    required_sources: frozenset[str] = frozenset()
    family_overrides: Mapping[str, str] | None = None
    counters: PipelineCounters = field(default_factory=PipelineCounters)
    warnings: list[str] = field(default_factory=list[str])

    def warn(self, message: str, *args: object) -> None:
        log.warning(message, *args)
        self.warnings.append(message % args if args else message)


@dataclass(slots=True)
class CatalogBuild:
    """Working set for one build; each phase fills in the next part."""

    sources: Sequence[Source]
    record_sets: list[RecordSet] = field(default_factory=list["RecordSet"])
    validated: list[RecordSet] = field(default_factory=list["RecordSet"])
    merged: MergedRecords | None = None
    registry: ProviderRegistry = field(default_factory=ProviderRegistry)
    filter: CompiledFilter = ALLOW_ALL
    visible_providers: list[Record] = field(default_factory=list["Record"])
    visible_models: list[Record] = field(default_factory=list["Record"])
    hidden_models: list[Record] = field(default_factory=list["Record"])
    providers: list[Provider] = field(default_factory=list["Provider"])
    models: list[Model] = field(default_factory=list["Model"])
    filtered_out: list[Model] = field(default_factory=list["Model"])
    snapshot: Snapshot | None = None

    def require_merged(self) -> MergedRecords:
        if self.merged is None:
            raise RuntimeError("Merge phase has not run")
        return self.merged

    def require_snapshot(self) -> Snapshot:
        if self.snapshot is None:
            raise RuntimeError("Index phase has not run")
        return self.snapshot
