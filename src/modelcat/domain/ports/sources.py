"""Ports for record sources feeding the build pipeline."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modelcat.domain.model.records import RecordSet


@runtime_checkable
class Source(Protocol):
    """Produces one record set per call; raises ``SourceError`` on failure."""

    @property
    def name(self) -> str: ...

    def load(self) -> RecordSet: ...


class PullResult(StrEnum):
    UPDATED = "updated"
    NOT_MODIFIED = "not_modified"


@runtime_checkable
class UpstreamSource(Source, Protocol):
    """A source backed by a local cache of a remote document."""

    def pull(self) -> PullResult: ...
