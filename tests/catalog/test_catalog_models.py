# tests/catalog/test_catalog_models.py
"""Tests for catalog descriptor models."""

from __future__ import annotations

from provider_resolver.catalog.models import (
    ModelDescriptor,
    ProviderDescriptor,
    python_package_for,
)
from provider_resolver.config.enums import LifecycleStatus, Modality


class TestPythonPackageFor:
    """Mapping of catalog package names to Python client packages."""

    def test_known_npm_packages(self):
        assert python_package_for("@ai-sdk/openai") == "openai"
        assert python_package_for("@ai-sdk/openai-compatible") == "openai"
        assert python_package_for("@ai-sdk/anthropic") == "anthropic"

    def test_unknown_npm_package_uses_chuk_llm(self):
        assert python_package_for("@ai-sdk/mistral") == "chuk_llm"

    def test_python_and_local_refs_unchanged(self):
        assert python_package_for("my_client") == "my_client"
        assert python_package_for("file:///tmp/client.py") == "file:///tmp/client.py"

    def test_none(self):
        assert python_package_for(None) is None


class TestModelDescriptor:
    """Tests for ModelDescriptor parsing."""

    def test_defaults(self):
        model = ModelDescriptor(id="m")
        assert model.name == "m"
        assert model.tool_call is True
        assert model.cost.input == 0
        assert model.limit.context == 0
        assert model.modalities.input == [Modality.TEXT]
        assert model.status == LifecycleStatus.STABLE
        assert model.is_free

    def test_experimental_flag_maps_to_status(self):
        model = ModelDescriptor.model_validate({"id": "m", "experimental": True})
        assert model.status == LifecycleStatus.EXPERIMENTAL

    def test_explicit_status_wins_over_flag(self):
        model = ModelDescriptor.model_validate(
            {"id": "m", "experimental": True, "status": "deprecated"}
        )
        assert model.status == LifecycleStatus.DEPRECATED

    def test_per_model_provider_package(self):
        model = ModelDescriptor.model_validate(
            {"id": "m", "provider": {"npm": "@ai-sdk/anthropic"}}
        )
        assert model.package == "anthropic"

    def test_upstream_id_prefers_alias(self):
        assert ModelDescriptor(id="fast", alias_target_id="real-1").upstream_id == "real-1"
        assert ModelDescriptor(id="fast").upstream_id == "fast"

    def test_unknown_fields_ignored(self):
        model = ModelDescriptor.model_validate({"id": "m", "knowledge": "2024-01"})
        assert model.id == "m"


class TestProviderDescriptor:
    """Tests for ProviderDescriptor parsing."""

    def test_npm_maps_to_package(self):
        provider = ProviderDescriptor.model_validate(
            {"id": "openai", "npm": "@ai-sdk/openai", "env": ["OPENAI_API_KEY"]}
        )
        assert provider.package == "openai"
        assert provider.package_ref == "openai"
        assert provider.name == "openai"

    def test_package_ref_defaults_to_chuk_llm(self):
        assert ProviderDescriptor(id="ollama", name="Ollama").package_ref == "chuk_llm"

    def test_free_models(self):
        provider = ProviderDescriptor.model_validate(
            {
                "id": "p",
                "models": {
                    "free": {"id": "free", "cost": {"input": 0, "output": 0}},
                    "paid": {"id": "paid", "cost": {"input": 1, "output": 2}},
                },
            }
        )
        assert list(provider.free_models()) == ["free"]
