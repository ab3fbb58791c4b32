"""OpenRouter source adapter."""

from __future__ import annotations

from .client import OpenRouterClient
from .schema import OpenRouterModel, OpenRouterModelList
from .source import OpenRouterSource
from .translator import split_model_id, translate_model, translate_model_list

__all__ = [
    "OpenRouterClient",
    "OpenRouterModel",
    "OpenRouterModelList",
    "OpenRouterSource",
    "split_model_id",
    "translate_model",
    "translate_model_list",
]
