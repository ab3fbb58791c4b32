"""HTTP client for the OpenRouter model list endpoint."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.adapters.http_resilience import ResilientClient

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from modelcat.config.http_resilience import ResilienceConfig
    from modelcat.config.openrouter import OpenRouterConfig

log = getLogger(__name__)

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


class OpenRouterClient:
    """Low-level client issuing conditional GETs for the model list."""

    def __init__(
        self,
        *,
        config: OpenRouterConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient

    def fetch_models(
        self, *, etag: str | None = None, last_modified: str | None = None
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        if etag:
            headers["If-None-Match"] = etag
        if last_modified:
            headers["If-Modified-Since"] = last_modified
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"

        log.debug("Requesting %s (conditional=%s)", self._config.url, bool(etag or last_modified))
        with self._client_factory(self._config.resilience) as client:
            return client.get(self._config.url, headers=headers)
