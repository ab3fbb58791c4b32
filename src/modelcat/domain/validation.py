"""Record schemas and the pure ``validate`` function used by the pipeline.

Validated records keep only the fields a source actually supplied. Defaults
are applied later by the enricher so that a source which omits a field never
overrides an earlier source that set it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, ClassVar, cast

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    ValidationError,
    field_validator,
    model_validator,
)

if TYPE_CHECKING:
    from modelcat.domain.model.records import Record

Number = StrictInt | StrictFloat
PositiveInt = Annotated[StrictInt, Field(ge=1)]


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _move_unknown_to_extra(value: object, known: frozenset[str]) -> object:
    if not isinstance(value, Mapping):
        return value
    data = dict(cast(Mapping[str, Any], value))
    unknown = {key: data.pop(key) for key in list(data) if key not in known}
    if unknown:
        explicit = data.get("extra")
        extra = dict(cast(Mapping[str, Any], explicit)) if isinstance(explicit, Mapping) else {}
        data["extra"] = _deep_merge(unknown, extra)
    return data


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(
                cast(Mapping[str, Any], current), cast(Mapping[str, Any], value)
            )
        else:
            merged[key] = value
    return merged


class RecordSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    known_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _collect_extra(cls, value: object) -> object:
        if isinstance(value, Mapping):
            value = cls._prepare(dict(cast(Mapping[str, Any], value)))
        return _move_unknown_to_extra(value, cls.known_fields)

    @classmethod
    def _prepare(cls, data: dict[str, Any]) -> dict[str, Any]:
        return data


class LimitsSchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    context: PositiveInt | None = None
    output: PositiveInt | None = None


class CostSchema(BaseModel):
    """Per-unit prices. Negative values are accepted; strings are not."""

    model_config = ConfigDict(extra="allow")

    input: Number | None = None
    output: Number | None = None
    cache_read: Number | None = None
    cache_write: Number | None = None
    training: Number | None = None
    reasoning: Number | None = None
    image: Number | None = None
    audio: Number | None = None
    input_audio: Number | None = None
    output_audio: Number | None = None
    input_video: Number | None = None
    output_video: Number | None = None
    request: Number | None = None

    @model_validator(mode="after")
    def _extra_costs_are_numeric(self) -> CostSchema:
        for key, value in (self.model_extra or {}).items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"cost.{key} must be a number")
        return self


class ModalitiesSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    input: list[str] | None = None
    output: list[str] | None = None


class ProviderSchema(RecordSchema):
    known_fields: ClassVar[frozenset[str]] = frozenset(
        {"id", "name", "base_url", "env", "doc", "extra"}
    )

    id: str = Field(min_length=1)
    name: str | None = None
    base_url: str | None = None
    env: list[str] | None = None
    doc: str | None = None
    extra: dict[str, Any] | None = None

    _normalize_id = field_validator("id", mode="before")(_blank_to_none)


class ModelSchema(RecordSchema):
    known_fields: ClassVar[frozenset[str]] = frozenset(
        {
            "id",
            "provider",
            "provider_model_id",
            "name",
            "family",
            "release_date",
            "description",
            "capabilities",
            "limits",
            "cost",
            "modalities",
            "aliases",
            "deprecated",
            "extra",
        }
    )

    id: str = Field(min_length=1)
    provider: str = Field(min_length=1)
    provider_model_id: str | None = None
    name: str | None = None
    family: str | None = None
    release_date: str | None = None
    description: str | None = None
    capabilities: dict[str, Any] | None = None
    limits: LimitsSchema | None = None
    cost: CostSchema | None = None
    modalities: ModalitiesSchema | None = None
    aliases: list[str] | None = None
    deprecated: StrictBool | None = None
    extra: dict[str, Any] | None = None

    @classmethod
    def _prepare(cls, data: dict[str, Any]) -> dict[str, Any]:
        # ``id`` wins over ``model``; ``model`` only fills a blank ``id``.
        model_value = _blank_to_none(data.pop("model", None))
        id_value = _blank_to_none(data.get("id"))
        if id_value is None and model_value is not None:
            data["id"] = model_value
        return data

    @field_validator("capabilities")
    @classmethod
    def _capability_leaves(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        if value is not None:
            _check_capability_tree(value, prefix="capabilities")
        return value


def _check_capability_tree(tree: Mapping[str, Any], *, prefix: str) -> None:
    for key, value in tree.items():
        path = f"{prefix}.{key}"
        if isinstance(value, Mapping):
            _check_capability_tree(cast(Mapping[str, Any], value), prefix=path)
        elif value is not None and not isinstance(value, (bool, int, float, str, list)):
            raise ValueError(f"{path} has unsupported value {value!r}")


@dataclass(frozen=True, slots=True)
class Valid:
    record: Record


@dataclass(frozen=True, slots=True)
class Invalid:
    reasons: tuple[str, ...]


type ValidationResult = Valid | Invalid


def validate(schema: type[RecordSchema], record: Mapping[str, Any]) -> ValidationResult:
    """Check ``record`` against ``schema`` without raising."""

    try:
        parsed = schema.model_validate(record)
    except ValidationError as exc:
        return Invalid(tuple(_format_error(error) for error in exc.errors()))
    return Valid(parsed.model_dump(exclude_unset=True, exclude_none=True))


def _format_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<record>"
    return f"{location}: {error.get('msg', 'invalid')}"
