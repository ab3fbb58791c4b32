from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from modelcat.adapters.http_resilience import ResilientClient
from modelcat.adapters.local import LocalSource
from modelcat.adapters.openrouter import OpenRouterSource
from modelcat.adapters.snapshot_file import SnapshotSource
from modelcat.app import (
    build_catalog_snapshot,
    build_sources,
    load_catalog,
    pull_sources,
    resolve_provider_env,
)
from modelcat.catalog import Catalog
from modelcat.config import (
    CatalogConfig,
    ConfigurationError,
    MissingConfigurationError,
    SourceConfig,
    StorageConfig,
    load_catalog_config,
)
from modelcat.domain.model import Model, Provider
from modelcat.domain.ports.sources import PullResult

if TYPE_CHECKING:
    from pathlib import Path

    from modelcat.config.http_resilience import ResilienceConfig


def test_build_writes_snapshot_and_load_reads_it(
    catalog_config_path: Path, tmp_path: Path
) -> None:
    config = load_catalog_config(catalog_config_path)
    output = tmp_path / "out" / "snapshot.json"

    snapshot, path = build_catalog_snapshot(config=config, output=output)

    assert path == output
    assert ("openai", "text-embedding-3-small") not in snapshot.models_by_key
    document = json.loads(output.read_bytes())
    assert document["providers"]["openai"]["models"]["gpt-4o"]["cost"] == {
        "input": 2.0,
        "output": 10.0,
    }

    catalog = load_catalog(snapshot_path=output, config=config, catalog=Catalog())
    model = catalog.get("openai", "4o")
    assert isinstance(model, Model)
    assert model.capability("json.native") is True
    assert catalog.select_first(require={"tools": True}) == ("anthropic", "claude-3-5-sonnet")


def test_build_defaults_to_storage_snapshot_path(
    catalog_config_path: Path, tmp_path: Path
) -> None:
    storage = StorageConfig(data_dir=tmp_path / "data")

    _, path = build_catalog_snapshot(
        config=load_catalog_config(catalog_config_path), storage=storage
    )

    assert path == storage.snapshot_path(ensure=False)
    assert path.is_file()


def test_build_without_sources_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        build_catalog_snapshot(config=CatalogConfig())


def test_load_catalog_requires_snapshot_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_catalog(snapshot_path=tmp_path / "missing.json", config=CatalogConfig())


def test_build_sources_by_kind(tmp_path: Path) -> None:
    config = CatalogConfig(
        sources=(
            SourceConfig(kind="local", name="mine", options={"dir": str(tmp_path)}),
            SourceConfig(kind="openrouter", name="openrouter"),
            SourceConfig(kind="snapshot", name="previous", options={"path": "x.json"}),
        )
    )

    sources = build_sources(config, storage=StorageConfig(data_dir=tmp_path))

    assert [type(source) for source in sources] == [LocalSource, OpenRouterSource, SnapshotSource]
    assert [source.name for source in sources] == ["mine", "openrouter", "previous"]


def test_local_source_requires_dir() -> None:
    config = CatalogConfig(sources=(SourceConfig(kind="local", name="local"),))

    with pytest.raises(ConfigurationError):
        build_sources(config)


def test_pull_sources_only_touches_upstream_sources(tmp_path: Path) -> None:
    payload: dict[str, Any] = {"data": [{"id": "openai/gpt-4o"}]}

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
        return ResilientClient(resilience, transport=transport)

    config = CatalogConfig(
        sources=(
            SourceConfig(kind="local", name="local", options={"dir": str(tmp_path)}),
            SourceConfig(kind="openrouter", name="openrouter"),
        )
    )
    sources = build_sources(
        config, storage=StorageConfig(data_dir=tmp_path / "data"), client_factory=factory
    )

    assert pull_sources(sources) == {"openrouter": PullResult.UPDATED}
    assert sources[1].load().models == [{"id": "gpt-4o", "provider": "openai"}]


def test_resolve_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    provider = Provider(id="openai", env=("OPENAI_API_KEY",))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    assert resolve_provider_env(provider) == {"OPENAI_API_KEY": "sk-test"}

    monkeypatch.delenv("OPENAI_API_KEY")
    with pytest.raises(MissingConfigurationError):
        resolve_provider_env(provider)
