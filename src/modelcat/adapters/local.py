"""Source reading hand-maintained provider files from a directory.

Each ``*.toml`` file describes one provider: top-level keys are provider
fields and ``[[models]]`` tables list its models. The provider id defaults to
the file stem.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import Any

from modelcat.domain.errors import SourceError
from modelcat.domain.model.records import RecordSet

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LocalSource:
    directory: Path
    name: str = "local"

    def load(self) -> RecordSet:
        directory = Path(self.directory).expanduser()
        if not directory.is_dir():
            log.info("Local source directory %s does not exist", directory)
            return RecordSet(origin=self.name)

        document: dict[str, Any] = {}
        for path in sorted(directory.glob("*.toml")):
            provider = self._read(path)
            provider_id = str(provider.get("id") or path.stem)
            document[provider_id] = provider
        return RecordSet.from_mapping(document, origin=self.name)

    def _read(self, path: Path) -> dict[str, Any]:
        try:
            with path.open("rb") as handle:
                return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise SourceError(self.name, f"invalid TOML in {path.name}: {exc}") from exc
        except OSError as exc:
            raise SourceError(self.name, f"cannot read {path}: {exc}") from exc
