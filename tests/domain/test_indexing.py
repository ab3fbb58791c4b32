from __future__ import annotations

from modelcat.domain.indexing import build_alias_index, build_indexes
from modelcat.domain.model import Model, Provider


def _model(model_id: str, provider: str = "openai", aliases: tuple[str, ...] = ()) -> Model:
    return Model(id=model_id, provider=provider, aliases=aliases)


def test_indexes_group_models_by_provider() -> None:
    providers = [Provider(id="openai"), Provider(id="anthropic")]
    models = [_model("gpt-4"), _model("claude-3", provider="anthropic"), _model("gpt-4o")]

    indexes, collisions = build_indexes(providers, models)

    assert collisions == []
    assert set(indexes.providers_by_id) == {"openai", "anthropic"}
    assert [m.id for m in indexes.models_by_provider["openai"]] == ["gpt-4", "gpt-4o"]
    assert indexes.models_by_key[("anthropic", "claude-3")].provider == "anthropic"


def test_alias_colliding_with_canonical_id_is_dropped() -> None:
    models = [_model("gpt-4"), _model("gpt-4-turbo", aliases=("gpt-4", "turbo"))]

    index, collisions = build_alias_index(models)

    assert index == {("openai", "turbo"): "gpt-4-turbo"}
    assert [(c.alias, c.model_ids) for c in collisions] == [("gpt-4", ("gpt-4-turbo",))]


def test_alias_claimed_by_two_models_is_dropped_for_both() -> None:
    models = [_model("a", aliases=("shared", "a1")), _model("b", aliases=("shared",))]

    indexes, collisions = build_indexes([Provider(id="openai")], models)

    assert ("openai", "shared") not in indexes.aliases_by_key
    assert collisions[0].model_ids == ("a", "b")
    assert indexes.models_by_key[("openai", "a")].aliases == ("a1",)
    assert indexes.models_by_key[("openai", "b")].aliases == ()


def test_same_alias_under_different_providers_is_fine() -> None:
    models = [_model("x", aliases=("fast",)), _model("y", provider="anthropic", aliases=("fast",))]

    index, collisions = build_alias_index(models)

    assert collisions == []
    assert index == {("openai", "fast"): "x", ("anthropic", "fast"): "y"}
