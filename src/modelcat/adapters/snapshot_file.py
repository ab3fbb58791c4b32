"""Serialized snapshot document and its on-disk file.

The document nests models under their provider::

    {"version": 2, "generated_at": "...",
     "providers": {"openai": {"name": "OpenAI", "models": {"gpt-4o": {...}}}}}

Indexes are never stored; they are rebuilt whenever a document is decoded.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from modelcat.domain.errors import CatalogError, SourceError
from modelcat.domain.filters import FilterSpec
from modelcat.domain.model.catalog import Model, Provider
from modelcat.domain.model.records import RecordSet
from modelcat.domain.model.registry import ProviderRegistry
from modelcat.domain.snapshot import Snapshot

if TYPE_CHECKING:
    from collections.abc import Sequence

log = getLogger(__name__)

SNAPSHOT_FORMAT_VERSION: Final[int] = 2


class SnapshotFormatError(CatalogError):
    """Raised when bytes do not hold a readable snapshot document."""


class ProviderDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    models: dict[str, dict[str, Any]] = Field(default_factory=dict[str, dict[str, Any]])


class SnapshotDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: Literal[2] = SNAPSHOT_FORMAT_VERSION
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    providers: dict[str, ProviderDocument] = Field(default_factory=dict[str, ProviderDocument])

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> SnapshotDocument:
        providers: dict[str, ProviderDocument] = {}
        for provider in snapshot.providers:
            record = provider.to_record()
            record.pop("id", None)
            models = {
                model.id: _without(model.to_record(), "id", "provider")
                for model in snapshot.models_by_provider.get(provider.id, ())
            }
            providers[provider.id] = ProviderDocument.model_validate({**record, "models": models})
        return cls(generated_at=snapshot.generated_at, providers=providers)

    def to_record_set(self, *, origin: str = "snapshot") -> RecordSet:
        record_set = RecordSet(origin=origin)
        for provider_id, provider in self.providers.items():
            record_set.providers.append({**(provider.model_extra or {}), "id": provider_id})
            for model_id, model in provider.models.items():
                record_set.models.append({**model, "id": model_id, "provider": provider_id})
        return record_set


def _without(record: dict[str, Any], *keys: str) -> dict[str, Any]:
    return {key: value for key, value in record.items() if key not in keys}


def encode_snapshot(snapshot: Snapshot) -> bytes:
    document = SnapshotDocument.from_snapshot(snapshot)
    return document.model_dump_json(indent=2).encode("utf-8")


def parse_document(data: bytes | str) -> SnapshotDocument:
    try:
        return SnapshotDocument.model_validate_json(data)
    except ValidationError as exc:
        raise SnapshotFormatError(f"Invalid snapshot document: {exc}") from exc


def decode_snapshot(
    data: bytes | str,
    filters: FilterSpec | None = None,
    prefer: Sequence[str] = (),
) -> Snapshot:
    """Rebuild a snapshot, applying ``filters`` to the stored models."""

    document = parse_document(data)
    record_set = document.to_record_set()

    providers = [Provider.from_record(record) for record in record_set.providers]
    try:
        registry = ProviderRegistry.from_ids(provider.id for provider in providers)
    except ValueError as exc:
        raise SnapshotFormatError(str(exc)) from exc

    compiled, _ = (filters or FilterSpec()).compile(registry.ids)
    visible: list[Model] = []
    hidden: list[Model] = []
    for record in record_set.models:
        model = Model.from_record(record)
        (visible if compiled(model.provider, model.id) else hidden).append(model)

    snapshot, _ = Snapshot.build(
        [provider for provider in providers if compiled.allows_provider(provider.id)],
        visible,
        hidden_models=hidden,
        filter=compiled,
        prefer=prefer,
        generated_at=document.generated_at,
        registry=registry,
    )
    return snapshot


@dataclass(frozen=True, slots=True)
class SnapshotFile:
    path: Path

    def exists(self) -> bool:
        return self.path.is_file()

    def load_bytes(self) -> bytes:
        return self.path.read_bytes()

    def save_bytes(self, data: bytes) -> None:
        """Write ``data`` atomically by renaming a temporary sibling file."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            tmp_path.replace(self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        log.info("Wrote snapshot to %s (%s bytes)", self.path, len(data))


@dataclass(frozen=True, slots=True)
class SnapshotSource:
    """Feeds a previously written snapshot file back into the pipeline."""

    file: SnapshotFile
    name: str = "snapshot"

    def load(self) -> RecordSet:
        try:
            data = self.file.load_bytes()
        except OSError as exc:
            raise SourceError(self.name, f"cannot read {self.file.path}: {exc}") from exc
        try:
            return parse_document(data).to_record_set(origin=self.name)
        except SnapshotFormatError as exc:
            raise SourceError(self.name, str(exc)) from exc
