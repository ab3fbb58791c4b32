"""Translate OpenRouter payloads into canonical records."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Final

from modelcat.domain.model.records import RecordSet

if TYPE_CHECKING:
    from modelcat.domain.model.records import Record

    from .schema import (
        OpenRouterArchitecture,
        OpenRouterModel,
        OpenRouterModelList,
        OpenRouterPricing,
    )

FALLBACK_PROVIDER: Final[str] = "openrouter"
PER_TOKEN_TO_PER_THOUSAND: Final[int] = 1000

PROVIDER_NAMES: Final[dict[str, str]] = {
    "openai": "OpenAI",
    "anthropic": "Anthropic",
    "google": "Google",
    "meta-llama": "Meta",
    "mistralai": "Mistral AI",
    "x-ai": "xAI",
    "deepseek": "DeepSeek",
    "cohere": "Cohere",
    "qwen": "Qwen",
    "amazon": "Amazon",
    "microsoft": "Microsoft",
    "nvidia": "NVIDIA",
    "perplexity": "Perplexity",
    FALLBACK_PROVIDER: "OpenRouter",
}

_PRICE_FIELDS: Final[dict[str, str]] = {
    "prompt": "input",
    "completion": "output",
    "input_cache_read": "cache_read",
    "input_cache_write": "cache_write",
    "internal_reasoning": "reasoning",
    "image": "image",
}

_PARAMETER_CAPABILITIES: Final[dict[str, tuple[str, str]]] = {
    "tools": ("tools", "enabled"),
    "reasoning": ("reasoning", "enabled"),
    "response_format": ("json", "native"),
    "structured_outputs": ("json", "schema"),
}


def provider_display_name(provider_id: str) -> str:
    return PROVIDER_NAMES.get(provider_id) or provider_id.replace("-", " ").title()


def split_model_id(openrouter_id: str) -> tuple[str, str]:
    """``vendor/model`` becomes ``(vendor, model)``; bare ids belong to OpenRouter."""

    vendor, sep, model_id = openrouter_id.partition("/")
    if not sep or not vendor or not model_id:
        return FALLBACK_PROVIDER, openrouter_id
    return vendor.lower(), model_id


def translate_model_list(payload: OpenRouterModelList, *, origin: str = "openrouter") -> RecordSet:
    providers: dict[str, Record] = {}
    models: list[Record] = []
    for entry in payload.data:
        provider_id, _ = split_model_id(entry.id)
        providers.setdefault(
            provider_id, {"id": provider_id, "name": provider_display_name(provider_id)}
        )
        models.append(translate_model(entry))
    return RecordSet(providers=list(providers.values()), models=models, origin=origin)


def translate_model(entry: OpenRouterModel) -> Record:
    provider_id, model_id = split_model_id(entry.id)
    record: Record = {"id": model_id, "provider": provider_id}
    if entry.name:
        record["name"] = entry.name
    if entry.description:
        record["description"] = entry.description
    if entry.created is not None:
        record["release_date"] = datetime.fromtimestamp(entry.created, tz=UTC).date().isoformat()

    limits = _limits(entry)
    if limits:
        record["limits"] = limits
    cost = _cost(entry.pricing)
    if cost:
        record["cost"] = cost
    modalities = _modalities(entry.architecture)
    if modalities:
        record["modalities"] = modalities
    capabilities = _capabilities(entry.supported_parameters)
    if capabilities:
        record["capabilities"] = capabilities
    return record


def _limits(entry: OpenRouterModel) -> dict[str, int]:
    limits: dict[str, int] = {}
    top_provider = entry.top_provider
    context = entry.context_length or (top_provider.context_length if top_provider else None)
    if context:
        limits["context"] = context
    if top_provider is not None and top_provider.max_completion_tokens:
        limits["output"] = top_provider.max_completion_tokens
    return limits


def _cost(pricing: OpenRouterPricing | None) -> dict[str, float]:
    if pricing is None:
        return {}
    cost: dict[str, float] = {}
    for source_field, cost_field in _PRICE_FIELDS.items():
        value = getattr(pricing, source_field)
        if value is not None:
            cost[cost_field] = value * PER_TOKEN_TO_PER_THOUSAND
    if pricing.request is not None:
        cost["request"] = pricing.request
    return cost


def _modalities(architecture: OpenRouterArchitecture | None) -> dict[str, list[str]]:
    if architecture is None:
        return {}
    if architecture.input_modalities or architecture.output_modalities:
        return {
            "input": list(architecture.input_modalities or ()),
            "output": list(architecture.output_modalities or ()),
        }
    if not architecture.modality or "->" not in architecture.modality:
        return {}
    inputs, _, outputs = architecture.modality.partition("->")
    return {
        "input": [tag for tag in inputs.split("+") if tag],
        "output": [tag for tag in outputs.split("+") if tag],
    }


def _capabilities(supported_parameters: list[str]) -> dict[str, Any]:
    capabilities: dict[str, dict[str, bool]] = {}
    for parameter in supported_parameters:
        target = _PARAMETER_CAPABILITIES.get(parameter)
        if target is None:
            continue
        group, leaf = target
        capabilities.setdefault(group, {})[leaf] = True
    return capabilities
