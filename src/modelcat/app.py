"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from modelcat.adapters.local import LocalSource
from modelcat.adapters.openrouter import OpenRouterSource
from modelcat.adapters.snapshot_file import (
    SnapshotFile,
    SnapshotSource,
    encode_snapshot,
)
from modelcat.catalog import Catalog, get_default_catalog
from modelcat.config import (
    ConfigurationError,
    get_catalog_config,
    get_storage_config,
    require_env_vars,
)
from modelcat.config.openrouter import get_openrouter_config
from modelcat.domain.filters import FilterSpec
from modelcat.domain.pipeline import run_pipeline
from modelcat.domain.ports.sources import PullResult, UpstreamSource

if TYPE_CHECKING:
    from modelcat.adapters.openrouter.client import ClientFactory
    from modelcat.config import CatalogConfig, SourceConfig, StorageConfig
    from modelcat.domain.model.catalog import Provider
    from modelcat.domain.ports.sources import Source
    from modelcat.domain.snapshot import Snapshot

log = getLogger(__name__)


def filter_spec(config: CatalogConfig) -> FilterSpec:
    return FilterSpec(allow=config.allow, deny=config.deny)


def build_sources(
    config: CatalogConfig,
    *,
    storage: StorageConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> list[Source]:
    """Instantiate the configured sources in precedence order."""

    return [
        _build_source(source, storage=storage, client_factory=client_factory)
        for source in config.sources
    ]


def _build_source(
    source: SourceConfig,
    *,
    storage: StorageConfig | None,
    client_factory: ClientFactory | None,
) -> Source:
    options = source.options
    match source.kind:
        case "local":
            return LocalSource(Path(_require_option(source, "dir")), name=source.name)
        case "openrouter":
            url = options.get("url")
            config = get_openrouter_config(url=str(url) if url else None, storage=storage)
            return OpenRouterSource(config, client_factory=client_factory, name=source.name)
        case "snapshot":
            path = Path(_require_option(source, "path"))
            return SnapshotSource(SnapshotFile(path), name=source.name)
        case _:
            raise ConfigurationError(f"Unsupported source kind: {source.kind}")


def _require_option(source: SourceConfig, key: str) -> str:
    value = source.options.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"Source {source.name!r} requires option {key!r}")
    return value


def pull_sources(sources: list[Source]) -> dict[str, PullResult]:
    """Refresh the local caches of every upstream-backed source."""

    results: dict[str, PullResult] = {}
    for source in sources:
        if isinstance(source, UpstreamSource):
            results[source.name] = source.pull()
            log.info("Pulled %s: %s", source.name, results[source.name])
    return results


def build_catalog_snapshot(
    *,
    config: CatalogConfig | None = None,
    output: Path | None = None,
    pull: bool = False,
    storage: StorageConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> tuple[Snapshot, Path]:
    """Run the pipeline over the configured sources and write the snapshot file."""

    catalog_config = config or get_catalog_config()
    storage_config = storage or get_storage_config()
    sources = build_sources(catalog_config, storage=storage_config, client_factory=client_factory)
    if not sources:
        raise ConfigurationError("No sources configured")
    if pull:
        pull_sources(sources)

    log.info("Building catalog from %s sources", len(sources))
    snapshot = run_pipeline(
        sources,
        filter_spec(catalog_config),
        catalog_config.prefer,
        required_sources=catalog_config.required_sources,
    )
    target = output or storage_config.snapshot_path()
    SnapshotFile(target).save_bytes(encode_snapshot(snapshot))
    return snapshot, target


def load_catalog(
    *,
    snapshot_path: Path | None = None,
    config: CatalogConfig | None = None,
    catalog: Catalog | None = None,
) -> Catalog:
    """Load a written snapshot file into ``catalog`` (the default catalog if omitted)."""

    catalog_config = config or get_catalog_config()
    path = snapshot_path or get_storage_config().snapshot_path(ensure=False)
    file = SnapshotFile(path)
    if not file.exists():
        raise ConfigurationError(f"Snapshot file not found: {path} (run 'modelcat build')")

    target = catalog or get_default_catalog()
    generation = target.load_snapshot(
        file.load_bytes(), filter_spec(catalog_config), catalog_config.prefer
    )
    log.debug("Loaded snapshot %s as generation %s", path, generation)
    return target


def resolve_provider_env(provider: Provider) -> dict[str, str]:
    """Return the environment variables ``provider`` needs, or raise if any is unset."""

    return require_env_vars(provider.env)
