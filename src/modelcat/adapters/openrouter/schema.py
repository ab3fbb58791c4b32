"""Pydantic models for the OpenRouter model list payload."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OpenRouterBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class OpenRouterPricing(OpenRouterBaseModel):
    """Prices in USD per token; the API sends them as decimal strings."""

    prompt: float | None = None
    completion: float | None = None
    request: float | None = None
    image: float | None = None
    input_cache_read: float | None = None
    input_cache_write: float | None = None
    internal_reasoning: float | None = None


class OpenRouterArchitecture(OpenRouterBaseModel):
    modality: str | None = None
    input_modalities: list[str] | None = None
    output_modalities: list[str] | None = None
    tokenizer: str | None = None


class OpenRouterTopProvider(OpenRouterBaseModel):
    context_length: int | None = None
    max_completion_tokens: int | None = None
    is_moderated: bool | None = None


class OpenRouterModel(OpenRouterBaseModel):
    id: str
    name: str | None = None
    created: int | None = None
    description: str | None = None
    context_length: int | None = None
    architecture: OpenRouterArchitecture | None = None
    pricing: OpenRouterPricing | None = None
    top_provider: OpenRouterTopProvider | None = None
    supported_parameters: list[str] = Field(default_factory=list[str])


class OpenRouterModelList(OpenRouterBaseModel):
    data: list[OpenRouterModel] = Field(default_factory=list["OpenRouterModel"])
