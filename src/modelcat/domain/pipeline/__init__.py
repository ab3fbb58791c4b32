"""Catalog build pipeline."""

from __future__ import annotations

from .context import CatalogBuild, PipelineContext, PipelineCounters
from .orchestrator import CatalogPipeline, PipelinePhase
from .phases import EnrichPhase, FilterPhase, IndexPhase, LoadPhase, MergePhase, ValidatePhase
from .runner import default_phases, run_pipeline

__all__ = [
    "CatalogBuild",
    "CatalogPipeline",
    "EnrichPhase",
    "FilterPhase",
    "IndexPhase",
    "LoadPhase",
    "MergePhase",
    "PipelineContext",
    "PipelineCounters",
    "PipelinePhase",
    "ValidatePhase",
    "default_phases",
    "run_pipeline",
]
