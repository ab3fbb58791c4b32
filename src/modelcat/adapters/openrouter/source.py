"""OpenRouter source: cached download plus translation to records."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from modelcat.domain.errors import SourceError
from modelcat.domain.ports.sources import PullResult

from .client import OpenRouterClient
from .schema import OpenRouterModelList
from .translator import translate_model_list

if TYPE_CHECKING:
    from pathlib import Path

    from modelcat.config.openrouter import OpenRouterConfig
    from modelcat.domain.model.records import RecordSet

    from .client import ClientFactory

log = getLogger(__name__)


@dataclass(slots=True)
class OpenRouterSource:
    """``pull`` refreshes the local cache; ``load`` only reads it."""

    config: OpenRouterConfig
    client_factory: ClientFactory | None = None
    name: str = "openrouter"
    _client: OpenRouterClient = field(init=False)

    def __post_init__(self) -> None:
        self._client = OpenRouterClient(config=self.config, client_factory=self.client_factory)

    @property
    def cache_path(self) -> Path:
        digest = hashlib.sha256(self.config.url.encode("utf-8")).hexdigest()[:8]
        return self.config.cache_dir / f"openrouter-{digest}.json"

    @property
    def manifest_path(self) -> Path:
        return self.cache_path.with_suffix(".manifest.json")

    def pull(self) -> PullResult:
        manifest = self._read_manifest()
        try:
            response = self._client.fetch_models(
                etag=manifest.get("etag"), last_modified=manifest.get("last_modified")
            )
        except httpx.HTTPError as exc:
            raise SourceError(self.name, f"request failed: {exc}") from exc

        if response.status_code == httpx.codes.NOT_MODIFIED:
            log.info("OpenRouter model list not modified")
            return PullResult.NOT_MODIFIED
        if response.status_code != httpx.codes.OK:
            raise SourceError(self.name, f"unexpected HTTP status {response.status_code}")

        body = response.content
        self.config.cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache_path.write_bytes(body)
        new_manifest = {
            "url": self.config.url,
            "etag": response.headers.get("etag"),
            "last_modified": response.headers.get("last-modified"),
            "sha256": hashlib.sha256(body).hexdigest(),
            "downloaded_at": datetime.now(UTC).isoformat(),
        }
        self.manifest_path.write_text(json.dumps(new_manifest, indent=2), encoding="utf-8")
        log.info("Cached OpenRouter model list at %s (%s bytes)", self.cache_path, len(body))
        return PullResult.UPDATED

    def load(self) -> RecordSet:
        try:
            raw = self.cache_path.read_bytes()
        except FileNotFoundError as exc:
            raise SourceError(self.name, f"no cached model list at {self.cache_path}") from exc
        except OSError as exc:
            raise SourceError(self.name, f"cannot read {self.cache_path}: {exc}") from exc
        try:
            payload = OpenRouterModelList.model_validate_json(raw)
        except ValidationError as exc:
            raise SourceError(self.name, f"invalid cached model list: {exc}") from exc
        return translate_model_list(payload, origin=self.name)

    def _read_manifest(self) -> dict[str, Any]:
        try:
            return json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            log.warning("Ignoring unreadable manifest %s", self.manifest_path)
            return {}
