"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogConfig, SourceConfig, get_catalog_config, load_catalog_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .openrouter import OpenRouterConfig, get_openrouter_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "CatalogConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "OpenRouterConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "SourceConfig",
    "StorageConfig",
    "configure_logging",
    "get_catalog_config",
    "get_openrouter_config",
    "get_storage_config",
    "load_catalog_config",
    "require_env_var",
    "require_env_vars",
]
