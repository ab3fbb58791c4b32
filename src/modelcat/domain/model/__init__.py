"""Catalog record types."""

from __future__ import annotations

from modelcat.domain.model.capabilities import capability_matches, resolve_capability
from modelcat.domain.model.catalog import Model, Provider, freeze, thaw
from modelcat.domain.model.records import ModelKey, Record, RecordSet
from modelcat.domain.model.registry import ProviderRegistry, normalize_provider_id

__all__ = [
    "Model",
    "ModelKey",
    "Provider",
    "ProviderRegistry",
    "Record",
    "RecordSet",
    "capability_matches",
    "freeze",
    "normalize_provider_id",
    "resolve_capability",
    "thaw",
]
