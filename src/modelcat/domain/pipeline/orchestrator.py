"""Phase-based orchestrator for the catalog build pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from modelcat.domain.pipeline.context import CatalogBuild, PipelineContext

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


class PipelinePhase(Protocol):
    """Contract implemented by each build phase."""

    name: str

    def run(self, build: CatalogBuild, *, context: PipelineContext) -> None: ...


@dataclass(slots=True)
class CatalogPipeline:
    """Run the configured phases in order against one ``CatalogBuild``."""

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)

    def with_phase(self, phase: PipelinePhase) -> CatalogPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return CatalogPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[PipelinePhase]) -> CatalogPipeline:
        return CatalogPipeline(phases=(*self.phases, *tuple(phases)))

    def run(self, build: CatalogBuild, *, context: PipelineContext | None = None) -> CatalogBuild:
        active_context = context or PipelineContext()
        for phase in self.phases:
            phase.run(build, context=active_context)
        return build
