"""Exceptions raised while building a catalog snapshot."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modelcat.domain.pipeline.context import PipelineCounters


class CatalogError(RuntimeError):
    """Base class for catalog build failures."""


class SourceError(CatalogError):
    """A source adapter failed to produce a record set."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class PipelineStage(StrEnum):
    LOAD = "load"
    VALIDATE = "validate"
    MERGE = "merge"
    FILTER = "filter"
    ENRICH = "enrich"
    INDEX = "index"


class FatalPipelineError(CatalogError):
    """Nothing usable survived a pipeline stage; the store must not change."""

    def __init__(self, stage: PipelineStage, message: str, counters: PipelineCounters) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message
        self.counters = counters
