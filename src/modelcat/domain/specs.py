"""Parsing and formatting of ``provider:model`` spec strings."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from modelcat.domain.results import LookupMiss

if TYPE_CHECKING:
    from collections.abc import Container

    from modelcat.domain.model.records import ModelKey


class SpecStyle(StrEnum):
    PROVIDER_COLON_MODEL = "provider_colon_model"
    MODEL_AT_PROVIDER = "model_at_provider"
    FILENAME_SAFE = "filename_safe"


def parse_spec(spec: str, known_providers: Container[str]) -> ModelKey | LookupMiss:
    """Split ``spec`` on its first colon.

    The model segment may contain further colons; the provider segment is
    lower-cased. The result is not checked against the catalog, only the
    provider has to be known.
    """

    provider, sep, model_id = spec.partition(":")
    provider = provider.strip().lower()
    model_id = model_id.strip()
    if not sep or not provider or not model_id:
        return LookupMiss.INVALID_FORMAT
    if provider not in known_providers:
        return LookupMiss.UNKNOWN_PROVIDER
    return (provider, model_id)


def format_spec(key: ModelKey, style: SpecStyle | str = SpecStyle.PROVIDER_COLON_MODEL) -> str:
    provider, model_id = key
    match SpecStyle(style):
        case SpecStyle.PROVIDER_COLON_MODEL:
            return f"{provider}:{model_id}"
        case SpecStyle.MODEL_AT_PROVIDER:
            return f"{model_id}@{provider}"
        case SpecStyle.FILENAME_SAFE:
            return f"{model_id}@{provider}".replace("/", "_").replace(":", "_")
