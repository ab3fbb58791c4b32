from __future__ import annotations

from typing import Any

import pytest

from modelcat.adapters.inline import InlineSource
from modelcat.catalog import Catalog

type CatalogData = dict[str, Any]


@pytest.fixture
def base_data() -> CatalogData:
    return {
        "providers": [
            {"id": "openai", "name": "OpenAI", "env": ["OPENAI_API_KEY"]},
            {"id": "anthropic", "name": "Anthropic", "env": ["ANTHROPIC_API_KEY"]},
        ],
        "models": [
            {
                "id": "gpt-4",
                "provider": "openai",
                "name": "GPT-4",
                "cost": {"input": 30.0, "output": 60.0},
                "capabilities": {"chat": True, "tools": {"enabled": True}},
                "aliases": ["gpt4"],
            },
            {
                "id": "gpt-3.5-turbo",
                "provider": "openai",
                "capabilities": {"chat": True},
            },
            {"id": "davinci", "provider": "openai"},
            {
                "id": "claude-3-5-sonnet",
                "provider": "anthropic",
                "capabilities": {"chat": True, "tools": {"enabled": True}},
                "aliases": ["claude-sonnet"],
            },
        ],
    }


@pytest.fixture
def base_source(base_data: CatalogData) -> InlineSource:
    return InlineSource(base_data, name="base")


@pytest.fixture
def loaded_catalog(base_source: InlineSource) -> Catalog:
    catalog = Catalog()
    catalog.load([base_source])
    return catalog


@pytest.fixture(autouse=True)
def _isolated_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    for name in (
        "MODELCAT_CONFIG",
        "MODELCAT_PREFER",
        "MODELCAT_OPENROUTER_URL",
        "OPENROUTER_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MODELCAT_DATA_DIR", str(tmp_path_factory.mktemp("data")))
