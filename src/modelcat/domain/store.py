"""Holder for the current snapshot.

Readers take the state reference once and never lock. Writers serialize on a
lock so each ``put`` gets its own generation; the generation counter lives as
long as the store and is never reset by ``clear``.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoreState[T]:
    snapshot: T
    generation: int
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


class SnapshotStore[T]:
    def __init__(self) -> None:
        self._state: StoreState[T] | None = None
        self._write_lock = threading.Lock()
        self._generations = itertools.count(1)

    def put(self, snapshot: T, options: Mapping[str, Any] | None = None) -> int:
        """Make ``snapshot`` current and return its generation."""

        with self._write_lock:
            generation = next(self._generations)
            self._state = StoreState(snapshot, generation, MappingProxyType(dict(options or {})))
        log.debug("Stored snapshot generation %s", generation)
        return generation

    def clear(self) -> None:
        with self._write_lock:
            self._state = None
        log.debug("Cleared snapshot store")

    def get(self) -> StoreState[T] | None:
        return self._state

    def snapshot(self) -> T | None:
        state = self._state
        return None if state is None else state.snapshot

    def generation(self) -> int:
        state = self._state
        return 0 if state is None else state.generation

    def last_options(self) -> Mapping[str, Any] | None:
        state = self._state
        return None if state is None else state.options
