from __future__ import annotations

from modelcat.domain.model import RecordSet


def test_flat_shape_synthesizes_missing_providers() -> None:
    record_set = RecordSet.from_mapping(
        {
            "providers": [{"id": "openai", "name": "OpenAI"}],
            "models": [
                {"id": "gpt-4", "provider": "openai"},
                {"id": "mistral-large", "provider": "mistral"},
            ],
        },
        origin="overrides",
    )

    assert record_set.origin == "overrides"
    assert record_set.providers == [{"id": "openai", "name": "OpenAI"}, {"id": "mistral"}]
    assert len(record_set.models) == 2


def test_provider_keyed_shape_nests_models() -> None:
    record_set = RecordSet.from_mapping(
        {
            "openai": {
                "name": "OpenAI",
                "models": [{"id": "gpt-4"}, {"id": "gpt-4o"}],
            },
            "anthropic": {"models": {"claude-3-haiku": {"name": "Claude 3 Haiku"}}},
        }
    )

    assert [provider["id"] for provider in record_set.providers] == ["openai", "anthropic"]
    assert "models" not in record_set.providers[0]
    assert record_set.models == [
        {"id": "gpt-4", "provider": "openai"},
        {"id": "gpt-4o", "provider": "openai"},
        {"id": "claude-3-haiku", "name": "Claude 3 Haiku", "provider": "anthropic"},
    ]


def test_reserved_keys_are_not_providers() -> None:
    record_set = RecordSet.from_mapping({"exclude": {"openai": ["gpt-4"]}})

    assert record_set.is_empty()
