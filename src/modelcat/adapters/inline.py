"""In-memory source for programmatic records and runtime overrides."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from modelcat.domain.model.records import RecordSet

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class InlineSource:
    data: Mapping[str, Any] = field(default_factory=dict[str, Any])
    name: str = "inline"

    def load(self) -> RecordSet:
        return RecordSet.from_mapping(self.data, origin=self.name)
