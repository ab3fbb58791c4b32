from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import pytest

from modelcat.adapters.inline import InlineSource
from modelcat.domain.errors import FatalPipelineError, PipelineStage, SourceError
from modelcat.domain.filters import FilterSpec
from modelcat.domain.pipeline import PipelineContext, run_pipeline

if TYPE_CHECKING:
    from modelcat.domain.model import RecordSet


@dataclass(slots=True)
class _FailingSource:
    name: str = "broken"

    def load(self) -> RecordSet:
        raise SourceError(self.name, "upstream unavailable")


def test_later_source_overrides_cost_leaf(base_source: InlineSource) -> None:
    override = InlineSource(
        {"models": [{"id": "gpt-4", "provider": "openai", "cost": {"input": 25.0}}]},
        name="override",
    )

    snapshot = run_pipeline([base_source, override])

    gpt4 = snapshot.models_by_key[("openai", "gpt-4")]
    assert gpt4.cost == {"input": 25.0, "output": 60.0}
    assert snapshot.providers_by_id["openai"].name == "OpenAI"


def test_deny_filter_hides_matching_models(base_source: InlineSource) -> None:
    snapshot = run_pipeline([base_source], FilterSpec(deny={"openai": ["gpt-*"]}))

    assert ("openai", "gpt-4") not in snapshot.models_by_key
    assert ("openai", "gpt-3.5-turbo") not in snapshot.models_by_key
    assert ("openai", "davinci") in snapshot.models_by_key
    assert snapshot.resolve_any("openai", "gpt4") == ("openai", "gpt-4")


def test_index_contains_exactly_valid_and_allowed_models(base_data: dict[str, Any]) -> None:
    base_data["models"].append({"id": "bad-cost", "provider": "openai", "cost": {"input": "x"}})
    base_data["models"].append({"id": "bare", "provider": "bare-provider"})
    base_data["models"].append({"id": "Bad Provider", "provider": "Not Valid!"})
    context = PipelineContext(filters=FilterSpec(deny={"anthropic": ["*"]}))

    snapshot = run_pipeline([InlineSource(base_data)], context=context)

    assert set(snapshot.models_by_key) == {
        ("openai", "gpt-4"),
        ("openai", "gpt-3.5-turbo"),
        ("openai", "davinci"),
        ("bare-provider", "bare"),
    }
    assert context.counters.invalid_models == 2
    assert context.counters.filtered_models == 1


def test_enrichment_defaults_are_applied(base_source: InlineSource) -> None:
    snapshot = run_pipeline([base_source])

    davinci = snapshot.models_by_key[("openai", "davinci")]
    assert davinci.capabilities["chat"] is False
    assert davinci.capability("tools.enabled") is False
    assert davinci.provider_model_id == "davinci"
    assert davinci.family == "davinci"


def test_optional_source_failure_is_skipped(base_source: InlineSource) -> None:
    context = PipelineContext()

    snapshot = run_pipeline([_FailingSource(), base_source], context=context)

    assert len(snapshot) == 4
    assert context.counters.sources_failed == 1
    assert any("broken" in warning for warning in context.warnings)


def test_required_source_failure_aborts(base_source: InlineSource) -> None:
    with pytest.raises(SourceError):
        run_pipeline([_FailingSource(), base_source], required_sources=["broken"])


def test_nothing_visible_is_fatal(base_source: InlineSource) -> None:
    with pytest.raises(FatalPipelineError) as exc:
        run_pipeline(
            [base_source], FilterSpec(deny={"openai": ["*"], "anthropic": ["*"]})
        )

    assert exc.value.stage is PipelineStage.FILTER
    assert exc.value.counters.filtered_models == 4


def test_no_sources_is_fatal() -> None:
    with pytest.raises(FatalPipelineError):
        run_pipeline([])


def test_allow_map_keeps_only_listed_providers(base_source: InlineSource) -> None:
    snapshot = run_pipeline([base_source], FilterSpec(allow={"anthropic": ["claude-*"]}))

    assert snapshot.provider_ids == ("anthropic",)
    assert list(snapshot.models_by_key) == [("anthropic", "claude-3-5-sonnet")]


def test_colliding_alias_is_dropped(base_data: dict[str, Any]) -> None:
    base_data["models"].append({"id": "gpt-4-turbo", "provider": "openai", "aliases": ["gpt4"]})
    context = PipelineContext()

    snapshot = run_pipeline([InlineSource(base_data)], context=context)

    assert snapshot.resolve("openai", "gpt4") is None
    assert snapshot.models_by_key[("openai", "gpt-4")].aliases == ()
    assert context.counters.alias_collisions == 1


def test_prefer_is_carried_into_snapshot(base_source: InlineSource) -> None:
    snapshot = run_pipeline([base_source], prefer=["anthropic"])

    assert snapshot.prefer == ("anthropic",)


def test_model_of_invalid_provider_is_orphaned(base_data: dict[str, Any]) -> None:
    base_data["providers"].append({"id": "ghost", "name": 123})
    base_data["models"].append({"id": "phantom", "provider": "ghost"})
    context = PipelineContext()

    snapshot = run_pipeline([InlineSource(base_data)], context=context)

    assert ("ghost", "phantom") not in snapshot.models_by_key
    assert context.counters.invalid_providers == 1
    assert context.counters.orphaned_models == 1


def test_single_source_duplicates_in_union_fields_are_removed() -> None:
    source = InlineSource(
        {
            "models": [
                {
                    "id": "gpt-4o",
                    "provider": "openai",
                    "modalities": {"input": ["text", "text", "image"]},
                }
            ]
        }
    )

    snapshot = run_pipeline([source])

    assert snapshot.models_by_key[("openai", "gpt-4o")].modalities["input"] == ("text", "image")


def test_filter_keys_match_normalised_provider_ids() -> None:
    source = InlineSource(
        {
            "providers": [{"id": "OpenAI"}],
            "models": [
                {"id": "gpt-4", "provider": "OpenAI"},
                {"id": "davinci", "provider": "OpenAI"},
            ],
        }
    )
    context = PipelineContext(filters=FilterSpec(deny={"OpenAI": ["gpt-*"]}))

    snapshot = run_pipeline([source], context=context)

    assert list(snapshot.models_by_key) == [("openai", "davinci")]
    assert context.counters.filter_warnings == 0
