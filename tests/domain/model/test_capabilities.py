from __future__ import annotations

from modelcat.domain.model import capability_matches, resolve_capability

CAPABILITIES = {
    "chat": True,
    "tools": {"enabled": True, "streaming": False},
    "json": {"native": True},
    "limits_hint": 3,
}


def test_dotted_path_resolves_leaf() -> None:
    assert resolve_capability(CAPABILITIES, "tools.streaming") is False
    assert resolve_capability(CAPABILITIES, "json.native") is True


def test_group_path_uses_enabled_leaf() -> None:
    assert resolve_capability(CAPABILITIES, "tools") is True
    assert resolve_capability(CAPABILITIES, "json") is None


def test_underscore_path_falls_back_to_nested_form() -> None:
    assert resolve_capability(CAPABILITIES, "json_native") is True
    assert resolve_capability(CAPABILITIES, "limits_hint") == 3


def test_missing_leaf_counts_as_false() -> None:
    assert resolve_capability(CAPABILITIES, "reasoning.enabled") is None
    assert capability_matches(CAPABILITIES, "reasoning.enabled", False)
    assert not capability_matches(CAPABILITIES, "reasoning.enabled", True)


def test_non_boolean_leaf_matches_by_truthiness() -> None:
    assert capability_matches(CAPABILITIES, "limits_hint", True)
    assert not capability_matches(CAPABILITIES, "chat", False)
