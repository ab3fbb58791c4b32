"""Entry point for building a catalog snapshot from sources."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.domain.filters import FilterSpec

from .context import CatalogBuild, PipelineContext
from .orchestrator import CatalogPipeline
from .phases import EnrichPhase, FilterPhase, IndexPhase, LoadPhase, MergePhase, ValidatePhase

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from modelcat.domain.ports.sources import Source
    from modelcat.domain.snapshot import Snapshot

    from .orchestrator import PipelinePhase

log = getLogger(__name__)


def default_phases() -> tuple[PipelinePhase, ...]:
    return (
        LoadPhase(),
        ValidatePhase(),
        MergePhase(),
        FilterPhase(),
        EnrichPhase(),
        IndexPhase(),
    )


def run_pipeline(
    sources: Sequence[Source],
    filters: FilterSpec | None = None,
    prefer: Iterable[str] = (),
    *,
    required_sources: Iterable[str] = (),
    family_overrides: Mapping[str, str] | None = None,
    context: PipelineContext | None = None,
) -> Snapshot:
    """Build a snapshot from ``sources`` (later sources take precedence).

    Raises ``SourceError`` when a required source fails and
    ``FatalPipelineError`` when nothing survives filtering. The returned
    snapshot is complete; nothing is stored.
    """

    active_context = context or PipelineContext(
        filters=filters or FilterSpec(),
        prefer=tuple(prefer),
        required_sources=frozenset(required_sources),
        family_overrides=family_overrides,
    )
    build = CatalogPipeline(phases=default_phases()).run(
        CatalogBuild(sources=tuple(sources)), context=active_context
    )
    snapshot = build.require_snapshot()

    counters = active_context.counters
    log.info(
        "Built catalog: %s providers, %s models (%s filtered, %s invalid, %s sources failed)",
        len(snapshot.providers),
        len(snapshot),
        counters.filtered_models,
        counters.dropped_invalid,
        counters.sources_failed,
    )
    return snapshot
