"""Synchronous HTTP client with retrying transport."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from httpx_retries import RetryTransport

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import HeaderTypes, QueryParamTypes, TimeoutTypes, URLTypes

    from modelcat.config.http_resilience import ResilienceConfig


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    follow_redirects: bool


class ClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.BaseTransport


class ResilientClient:
    """``httpx.Client`` wrapper whose transport retries per ``config.retry``.

    ``transport`` replaces the network transport underneath the retry layer,
    which is how tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self, config: ResilienceConfig, *, transport: httpx.BaseTransport | None = None
    ) -> None:
        self.config = config
        retry_transport = RetryTransport(transport=transport, retry=config.retry.build())

        client_kwargs: ClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": retry_transport,
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers:
            client_kwargs["headers"] = dict(config.default_headers)
        self._client = httpx.Client(**client_kwargs)

    def __enter__(self) -> ResilientClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return self._client.get(url, **kwargs)
