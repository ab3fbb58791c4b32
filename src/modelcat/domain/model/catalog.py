"""Immutable provider and model values served from a snapshot."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, cast

from modelcat.domain.model.capabilities import resolve_capability
from modelcat.domain.specs import SpecStyle, format_spec

if TYPE_CHECKING:
    from modelcat.domain.model.records import ModelKey, Record

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def freeze(value: object) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples."""

    if isinstance(value, Mapping):
        mapping = cast(Mapping[str, Any], value)
        return MappingProxyType({key: freeze(item) for key, item in mapping.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in cast(Sequence[Any], value))
    return value


def thaw(value: object) -> Any:
    """Inverse of :func:`freeze`, producing plain dicts and lists."""

    if isinstance(value, Mapping):
        mapping = cast(Mapping[str, Any], value)
        return {key: thaw(item) for key, item in mapping.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in cast(tuple[Any, ...], value)]
    return value


@dataclass(frozen=True, slots=True, kw_only=True)
class Provider:
    id: str
    name: str | None = None
    base_url: str | None = None
    env: tuple[str, ...] = ()
    doc: str | None = None
    extra: Mapping[str, Any] = field(default=_EMPTY)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Provider:
        known, extra = _split_known(cls, record)
        return cls(
            id=known["id"],
            name=known.get("name"),
            base_url=known.get("base_url"),
            env=tuple(known.get("env") or ()),
            doc=known.get("doc"),
            extra=freeze(extra),
        )

    def to_record(self) -> Record:
        return _to_record(self)


@dataclass(frozen=True, slots=True, kw_only=True)
class Model:
    """One catalogued model, keyed by ``(provider, id)``."""

    id: str
    provider: str
    provider_model_id: str | None = None
    name: str | None = None
    family: str | None = None
    release_date: str | None = None
    description: str | None = None
    capabilities: Mapping[str, Any] = field(default=_EMPTY)
    limits: Mapping[str, Any] = field(default=_EMPTY)
    cost: Mapping[str, Any] = field(default=_EMPTY)
    modalities: Mapping[str, Any] = field(default=_EMPTY)
    aliases: tuple[str, ...] = ()
    deprecated: bool = False
    extra: Mapping[str, Any] = field(default=_EMPTY)

    @property
    def key(self) -> ModelKey:
        return (self.provider, self.id)

    def capability(self, path: str) -> object | None:
        return resolve_capability(self.capabilities, path)

    def spec(self, style: SpecStyle = SpecStyle.PROVIDER_COLON_MODEL) -> str:
        return format_spec(self.key, style)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Model:
        known, extra = _split_known(cls, record)
        return cls(
            id=known["id"],
            provider=known["provider"],
            provider_model_id=known.get("provider_model_id"),
            name=known.get("name"),
            family=known.get("family"),
            release_date=known.get("release_date"),
            description=known.get("description"),
            capabilities=freeze(known.get("capabilities") or {}),
            limits=freeze(known.get("limits") or {}),
            cost=freeze(known.get("cost") or {}),
            modalities=freeze(known.get("modalities") or {}),
            aliases=tuple(known.get("aliases") or ()),
            deprecated=bool(known.get("deprecated", False)),
            extra=freeze(extra),
        )

    def to_record(self) -> Record:
        return _to_record(self)


def _split_known(
    cls: type[Provider] | type[Model], record: Mapping[str, Any]
) -> tuple[dict[str, Any], dict[str, Any]]:
    names = {f.name for f in fields(cls)}
    known = {key: value for key, value in record.items() if key in names and key != "extra"}
    extra: dict[str, Any] = dict(cast(Mapping[str, Any], record.get("extra") or {}))
    for key, value in record.items():
        if key not in names:
            extra.setdefault(key, value)
    return known, extra


def _to_record(entity: Provider | Model) -> Record:
    record: Record = {}
    for f in fields(entity):
        value = thaw(getattr(entity, f.name))
        if value is None or (f.name == "extra" and not value):
            continue
        record[f.name] = value
    return record
