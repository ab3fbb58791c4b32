"""Catalog build configuration (filters, preference order, sources)."""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Literal

from .env import optional_env_list
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

CONFIG_PATH_ENV_VAR: Final[str] = "MODELCAT_CONFIG"
PREFER_ENV_VAR: Final[str] = "MODELCAT_PREFER"
SOURCE_KINDS: Final[frozenset[str]] = frozenset({"local", "openrouter", "snapshot"})

type FilterPattern = str | re.Pattern[str]
type ProviderPatterns = tuple[FilterPattern, ...] | Literal["all"]
type PatternsByProvider = dict[str, ProviderPatterns]
type AllowConfig = Literal["all"] | PatternsByProvider


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """One configured record source, in precedence order (last wins)."""

    kind: str
    name: str
    options: Mapping[str, Any] = field(default_factory=dict[str, Any])


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    allow: AllowConfig = "all"
    deny: PatternsByProvider = field(default_factory=dict[str, "ProviderPatterns"])
    prefer: tuple[str, ...] = ()
    sources: tuple[SourceConfig, ...] = ()
    required_sources: frozenset[str] = frozenset()


def get_catalog_config(path: Path | None = None) -> CatalogConfig:
    """Load catalog configuration from ``path`` or ``$MODELCAT_CONFIG``.

    Without a file the permissive defaults apply: everything allowed, nothing
    denied, no provider preference. ``$MODELCAT_PREFER`` (comma separated)
    overrides the preference order from the file.
    """

    config_path = path
    if config_path is None:
        env_path = os.getenv(CONFIG_PATH_ENV_VAR)
        config_path = Path(env_path) if env_path else None

    config = CatalogConfig() if config_path is None else load_catalog_config(config_path)

    prefer_override = optional_env_list(PREFER_ENV_VAR)
    if prefer_override is not None:
        config = replace(config, prefer=prefer_override)
    return config


def load_catalog_config(path: Path) -> CatalogConfig:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigurationError("catalog config not found", path=path) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"invalid TOML: {exc}", path=path) from exc
    try:
        return parse_catalog_config(data, base_dir=path.parent)
    except ConfigurationError as exc:
        if exc.path is not None:
            raise
        raise ConfigurationError(str(exc), path=path) from exc


def parse_catalog_config(data: Mapping[str, Any], *, base_dir: Path | None = None) -> CatalogConfig:
    filters = data.get("filters", {})
    if not isinstance(filters, dict):
        raise ConfigurationError("'filters' must be a table")

    sources = tuple(
        _parse_source(entry, index=index, base_dir=base_dir)
        for index, entry in enumerate(_as_list(data.get("sources", []), "sources"))
    )
    required_names = _as_list(data.get("required_sources", []), "required_sources")
    required = frozenset(str(name) for name in required_names)
    unknown_required = required - {source.name for source in sources}
    if unknown_required:
        names = ", ".join(sorted(unknown_required))
        raise ConfigurationError(f"Required sources are not configured: {names}")

    return CatalogConfig(
        allow=_parse_allow(filters.get("allow", "all")),
        deny=_parse_patterns_by_provider(filters.get("deny", {}), section="deny"),
        prefer=tuple(str(provider) for provider in _as_list(data.get("prefer", []), "prefer")),
        sources=sources,
        required_sources=required,
    )


def parse_pattern(value: object) -> FilterPattern:
    """Parse one filter pattern; ``/.../`` strings become regular expressions."""

    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"Filter patterns must be non-empty strings, got {value!r}")
    if len(value) > 2 and value.startswith("/") and value.endswith("/"):
        try:
            return re.compile(value[1:-1])
        except re.error as exc:
            raise ConfigurationError(f"Invalid regex pattern {value!r}: {exc}") from exc
    return value


def _parse_allow(value: object) -> AllowConfig:
    if value == "all":
        return "all"
    return _parse_patterns_by_provider(value, section="allow")


def _parse_patterns_by_provider(value: object, *, section: str) -> PatternsByProvider:
    if not isinstance(value, dict):
        raise ConfigurationError(f"'filters.{section}' must be a table of provider patterns")
    patterns: PatternsByProvider = {}
    for provider, raw in value.items():
        if raw == "all":
            patterns[str(provider)] = "all"
            continue
        entries = [raw] if isinstance(raw, str) else _as_list(raw, f"filters.{section}.{provider}")
        patterns[str(provider)] = tuple(parse_pattern(entry) for entry in entries)
    return patterns


def _parse_source(entry: object, *, index: int, base_dir: Path | None) -> SourceConfig:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"sources[{index}] must be a table")
    kind = entry.get("kind")
    if kind not in SOURCE_KINDS:
        kinds = ", ".join(sorted(SOURCE_KINDS))
        raise ConfigurationError(f"sources[{index}].kind must be one of: {kinds}")
    options = {key: value for key, value in entry.items() if key not in {"kind", "name"}}
    for key in ("dir", "path"):
        raw_path = options.get(key)
        if isinstance(raw_path, str):
            path = Path(raw_path).expanduser()
            options[key] = str(path if base_dir is None else base_dir / path)
    return SourceConfig(kind=kind, name=str(entry.get("name", kind)), options=options)


def _as_list(value: object, name: str) -> list[Any]:
    if not isinstance(value, list):
        raise ConfigurationError(f"'{name}' must be an array")
    return value
