# tests/model_management/test_ranking.py
"""Tests for model references and ranking."""

from provider_resolver.catalog.models import ModelDescriptor
from provider_resolver.config.defaults import SMALL_MODEL_PRIORITY
from provider_resolver.model_management.ranking import (
    ModelRef,
    parse_model,
    priority_rank,
    small_model_priority,
    sort_models,
)


class TestParseModel:
    def test_simple(self):
        assert parse_model("openai/gpt-5") == ModelRef("openai", "gpt-5")

    def test_nested_slashes_stay_in_model(self):
        ref = parse_model("openrouter/openai/gpt-5")
        assert ref.provider_id == "openrouter"
        assert ref.model_id == "openai/gpt-5"

    def test_str(self):
        assert str(ModelRef("a", "b")) == "a/b"


class TestSortModels:
    """Tests for sort_models()."""

    def test_priority_then_latest(self):
        ranked = sort_models(
            ["gpt-5", "gpt-5-latest", "gemini-3-pro"], priority=["gpt-5", "gemini-3-pro"]
        )
        assert ranked == ["gpt-5-latest", "gpt-5", "gemini-3-pro"]

    def test_unlisted_sort_last_by_id_descending(self):
        ranked = sort_models(["aaa", "zzz", "gpt-5"], priority=["gpt-5"])
        assert ranked == ["gpt-5", "zzz", "aaa"]

    def test_descriptors(self):
        models = [ModelDescriptor(id=i, name=i) for i in ("m-1", "m-2")]
        assert [m.id for m in sort_models(models, priority=[])] == ["m-2", "m-1"]

    def test_priority_rank(self):
        assert priority_rank("claude-sonnet-4-5", ["gpt-5", "claude-sonnet-4"]) == 1
        assert priority_rank("llama", ["gpt-5"]) == 1


class TestSmallModelPriority:
    def test_default(self):
        assert small_model_priority("anthropic") == SMALL_MODEL_PRIORITY

    def test_override(self):
        assert small_model_priority("opencode") == ["gpt-5-nano"]

    def test_exclusion(self):
        priority = small_model_priority("github-copilot")
        assert "claude-haiku-4.5" not in priority
        assert "claude-haiku-4-5" in priority
