from __future__ import annotations

import pytest

from modelcat.domain.enrichment import apply_capability_defaults
from modelcat.domain.model import Model, Provider
from modelcat.domain.results import LookupMiss
from modelcat.domain.selection import order_providers, select, select_first
from modelcat.domain.snapshot import Snapshot


def _model(model_id: str, provider: str, **capabilities: object) -> Model:
    return Model.from_record(
        {
            "id": model_id,
            "provider": provider,
            "capabilities": apply_capability_defaults(capabilities),
        }
    )


@pytest.fixture
def snapshot() -> Snapshot:
    snapshot, _ = Snapshot.build(
        [Provider(id="provider_a"), Provider(id="provider_b"), Provider(id="provider_c")],
        [
            _model("a-chat", "provider_a", chat=True, tools={"enabled": True}),
            _model("a-embed", "provider_a", embeddings=True),
            _model("b-chat", "provider_b", chat=True, tools={"enabled": True}),
            _model("c-chat", "provider_c", chat=True),
        ],
    )
    return snapshot


def test_preferred_provider_comes_first(snapshot: Snapshot) -> None:
    keys = select(
        snapshot,
        require={"chat": True, "tools": True},
        prefer=["provider_b", "provider_a"],
    )

    assert keys == [("provider_b", "b-chat"), ("provider_a", "a-chat")]


def test_unlisted_providers_keep_snapshot_order(snapshot: Snapshot) -> None:
    keys = select(snapshot, require={"chat": True}, prefer=["provider_c"])

    assert keys == [
        ("provider_c", "c-chat"),
        ("provider_a", "a-chat"),
        ("provider_b", "b-chat"),
    ]


def test_forbid_excludes_matches(snapshot: Snapshot) -> None:
    keys = select(snapshot, require=[("chat", True)], forbid=[("tools.enabled", True)])

    assert keys == [("provider_c", "c-chat")]


def test_missing_leaf_matches_false(snapshot: Snapshot) -> None:
    keys = select(snapshot, require={"chat": False, "reasoning.budget": False})

    assert keys == [("provider_a", "a-embed")]


def test_scope_restricts_to_one_provider(snapshot: Snapshot) -> None:
    assert select(snapshot, require={"chat": True}, scope="provider_b") == [
        ("provider_b", "b-chat")
    ]
    assert select(snapshot, scope="unknown") == []


def test_select_first(snapshot: Snapshot) -> None:
    assert select_first(snapshot, require={"tools": True}) == ("provider_a", "a-chat")
    assert select_first(snapshot, require={"json.native": True}) is LookupMiss.NO_MATCH


def test_unloaded_snapshot_yields_no_match() -> None:
    assert select(None, require={"chat": True}) == []
    assert select_first(None) is LookupMiss.NO_MATCH


def test_order_providers_ignores_unknown_and_duplicate_preferences() -> None:
    assert order_providers(["a", "b", "c"], ["x", "c", "c", "a"]) == ["c", "a", "b"]
