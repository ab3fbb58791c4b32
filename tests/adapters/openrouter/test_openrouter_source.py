from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from modelcat.adapters.http_resilience import ResilientClient
from modelcat.adapters.openrouter import OpenRouterSource
from modelcat.domain.errors import SourceError
from modelcat.domain.ports.sources import PullResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from modelcat.config.http_resilience import ResilienceConfig
    from modelcat.config.openrouter import OpenRouterConfig

type Handler = Callable[[httpx.Request], httpx.Response]


def _source(config: OpenRouterConfig, handler: Handler) -> OpenRouterSource:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return OpenRouterSource(config, client_factory=factory)


def test_pull_caches_payload_and_manifest(
    openrouter_config: OpenRouterConfig, openrouter_payload: dict[str, Any]
) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=openrouter_payload, headers={"ETag": '"v1"'})

    source = _source(openrouter_config, handler)

    assert source.pull() is PullResult.UPDATED
    assert requests[0].headers["Authorization"] == "Bearer secret-key"
    assert "If-None-Match" not in requests[0].headers
    assert json.loads(source.cache_path.read_bytes()) == openrouter_payload
    manifest = json.loads(source.manifest_path.read_text(encoding="utf-8"))
    assert manifest["etag"] == '"v1"'
    assert manifest["url"] == openrouter_config.url

    record_set = source.load()
    assert record_set.origin == "openrouter"
    assert len(record_set.models) == 3


def test_second_pull_is_conditional(
    openrouter_config: OpenRouterConfig, openrouter_payload: dict[str, Any]
) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.headers.get("If-None-Match") == '"v1"':
            return httpx.Response(304)
        return httpx.Response(200, json=openrouter_payload, headers={"ETag": '"v1"'})

    source = _source(openrouter_config, handler)

    assert source.pull() is PullResult.UPDATED
    assert source.pull() is PullResult.NOT_MODIFIED
    assert len(requests) == 2
    assert len(source.load().models) == 3


def test_pull_rejects_error_status(openrouter_config: OpenRouterConfig) -> None:
    source = _source(openrouter_config, lambda request: httpx.Response(404))

    with pytest.raises(SourceError) as exc:
        source.pull()

    assert exc.value.source == "openrouter"
    assert not source.cache_path.exists()


def test_pull_wraps_transport_errors(openrouter_config: OpenRouterConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    source = _source(openrouter_config, handler)

    with pytest.raises(SourceError):
        source.pull()


def test_load_without_cache_fails(openrouter_config: OpenRouterConfig) -> None:
    source = _source(openrouter_config, lambda request: httpx.Response(500))

    with pytest.raises(SourceError):
        source.load()


def test_load_rejects_corrupt_cache(openrouter_config: OpenRouterConfig) -> None:
    source = _source(openrouter_config, lambda request: httpx.Response(500))
    openrouter_config.cache_dir.mkdir(parents=True)
    source.cache_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SourceError):
        source.load()


def test_cache_path_depends_on_url(openrouter_config: OpenRouterConfig) -> None:
    source = _source(openrouter_config, lambda request: httpx.Response(500))

    assert source.cache_path.parent == openrouter_config.cache_dir
    assert source.cache_path.name.startswith("openrouter-")
    assert source.manifest_path.name.endswith(".manifest.json")


def test_unreadable_cache_is_a_source_error(openrouter_config: OpenRouterConfig) -> None:
    source = _source(openrouter_config, lambda request: httpx.Response(500))
    source.cache_path.mkdir(parents=True)

    with pytest.raises(SourceError) as exc:
        source.load()

    assert exc.value.source == "openrouter"
