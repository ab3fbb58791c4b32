from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from modelcat.config.http_resilience import ResilienceConfig, RetryPolicy
from modelcat.config.openrouter import OpenRouterConfig

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def openrouter_payload() -> dict[str, Any]:
    return {
        "data": [
            {
                "id": "openai/gpt-4o",
                "name": "OpenAI: GPT-4o",
                "created": 1715558400,
                "context_length": 128000,
                "architecture": {
                    "modality": "text+image->text",
                    "input_modalities": ["text", "image"],
                    "output_modalities": ["text"],
                },
                "pricing": {
                    "prompt": "0.0000025",
                    "completion": "0.00001",
                    "request": "0",
                    "input_cache_read": "0.00000125",
                },
                "top_provider": {"context_length": 128000, "max_completion_tokens": 16384},
                "supported_parameters": ["tools", "response_format", "temperature"],
            },
            {
                "id": "mistralai/mistral-small",
                "architecture": {"modality": "text->text"},
                "top_provider": {"context_length": 32000},
                "supported_parameters": ["reasoning", "structured_outputs"],
            },
            {"id": "auto"},
        ]
    }


@pytest.fixture
def openrouter_config(tmp_path: Path) -> OpenRouterConfig:
    return OpenRouterConfig(
        url="https://openrouter.test/api/v1/models",
        cache_dir=tmp_path / "upstream",
        resilience=ResilienceConfig(
            name="openrouter", retry=RetryPolicy(total=0, backoff_factor=0.0)
        ),
        api_key="secret-key",
    )
