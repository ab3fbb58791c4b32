"""Closed set of provider identifiers known to one snapshot."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

PROVIDER_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9][a-z0-9_.-]*$")


def normalize_provider_id(raw: object) -> str | None:
    """Return the canonical form of ``raw`` or ``None`` if it is not a valid id."""

    if not isinstance(raw, str):
        return None
    candidate = raw.strip().lower()
    if not PROVIDER_ID_PATTERN.match(candidate):
        return None
    return candidate


@dataclass(frozen=True, slots=True)
class ProviderRegistry:
    ids: frozenset[str] = frozenset()

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> ProviderRegistry:
        valid: set[str] = set()
        for raw in ids:
            normalized = normalize_provider_id(raw)
            if normalized is None:
                raise ValueError(f"Invalid provider id: {raw!r}")
            valid.add(normalized)
        return cls(frozenset(valid))

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self.ids

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.ids))

    def __len__(self) -> int:
        return len(self.ids)
