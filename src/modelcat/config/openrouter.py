"""OpenRouter source configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .http_resilience import ResilienceConfig, RetryPolicy
from .storage import StorageConfig, get_storage_config

if TYPE_CHECKING:
    from pathlib import Path

OPENROUTER_MODELS_URL = "https://openrouter.ai/api/v1/models"
OPENROUTER_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True, slots=True)
class OpenRouterConfig:
    url: str
    cache_dir: Path
    resilience: ResilienceConfig
    api_key: str | None = None


def get_openrouter_config(
    *,
    url: str | None = None,
    storage: StorageConfig | None = None,
    resilience: ResilienceConfig | None = None,
) -> OpenRouterConfig:
    storage_config = storage or get_storage_config()
    api_key = os.getenv("OPENROUTER_API_KEY") or None
    return OpenRouterConfig(
        url=url or os.getenv("MODELCAT_OPENROUTER_URL") or OPENROUTER_MODELS_URL,
        cache_dir=storage_config.upstream_cache_dir(ensure=False),
        api_key=api_key,
        resilience=resilience
        or ResilienceConfig(
            name="openrouter",
            timeout_seconds=OPENROUTER_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=3),
            default_headers={"Accept": "application/json"},
        ),
    )
