from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

OPENAI_TOML = """
name = "OpenAI"
env = ["OPENAI_API_KEY"]

[[models]]
id = "gpt-4o"
aliases = ["4o"]
cost = { input = 2.5, output = 10.0 }
capabilities = { chat = true, tools = true, json = { native = true } }

[[models]]
id = "text-embedding-3-small"
capabilities = { embeddings = true }
"""

ANTHROPIC_TOML = """
name = "Anthropic"

[[models]]
id = "claude-3-5-sonnet"
capabilities = { chat = true, tools = { enabled = true } }
"""

OVERRIDE_TOML = """
[[models]]
id = "gpt-4o"
cost = { input = 2.0 }
"""


@pytest.fixture
def catalog_config_path(tmp_path: Path) -> Path:
    providers = tmp_path / "providers"
    providers.mkdir()
    (providers / "openai.toml").write_text(OPENAI_TOML, encoding="utf-8")
    (providers / "anthropic.toml").write_text(ANTHROPIC_TOML, encoding="utf-8")
    overrides = tmp_path / "overrides"
    overrides.mkdir()
    (overrides / "openai.toml").write_text(OVERRIDE_TOML, encoding="utf-8")

    config_path = tmp_path / "modelcat.toml"
    config_path.write_text(
        """
prefer = ["anthropic"]
required_sources = ["providers"]

[filters.deny]
openai = ["text-embedding-*"]

[[sources]]
kind = "local"
name = "providers"
dir = "providers"

[[sources]]
kind = "local"
name = "overrides"
dir = "overrides"
""",
        encoding="utf-8",
    )
    return config_path
