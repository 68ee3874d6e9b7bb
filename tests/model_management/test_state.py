# tests/model_management/test_state.py
"""Tests for the layered provider state build."""

from __future__ import annotations

import pytest

from conftest import api_credential, catalog_data
from provider_resolver.catalog.models import ProviderDescriptor
from provider_resolver.catalog.source import StaticCatalog, parse_catalog
from provider_resolver.config.enums import ProviderSource
from provider_resolver.config.models import ModelConfig, ProviderConfig, ResolverConfig
from provider_resolver.model_management.loaders import LoaderResult
from provider_resolver.model_management.state import (
    add_enterprise_variant,
    merge_provider_config,
)


def alpha_options(**options) -> ResolverConfig:
    return ResolverConfig(provider={"alpha": ProviderConfig(options=options)})


async def autoload(provider, ctx):
    return LoaderResult(autoload=True, options={"from_hook": True})


class TestActivation:
    """Which layers activate a provider."""

    @pytest.mark.asyncio
    async def test_nothing_configured(self, make_manager):
        assert await make_manager().list() == {}

    @pytest.mark.asyncio
    async def test_env_key(self, make_manager):
        providers = await make_manager(environ={"ALPHA_API_KEY": "env-key"}).list()

        alpha = providers["alpha"]
        assert alpha.source == ProviderSource.ENV
        assert alpha.options == {
            "api_key": "env-key",
            "base_url": "https://alpha.example/v1",
        }

    @pytest.mark.asyncio
    async def test_several_env_vars_activate_without_key(self, make_manager):
        providers = await make_manager(environ={"BETA_API_KEY": "b"}).list()

        assert "api_key" not in providers["beta"].options

    @pytest.mark.asyncio
    async def test_only_first_env_var_activates(self, make_manager):
        providers = await make_manager(environ={"BETA_TOKEN": "t"}).list()

        assert "beta" not in providers

    @pytest.mark.asyncio
    async def test_empty_env_value_ignored(self, make_manager):
        assert await make_manager(environ={"ALPHA_API_KEY": ""}).list() == {}

    @pytest.mark.asyncio
    async def test_stored_credential(self, make_manager):
        providers = await make_manager(credentials={"alpha": api_credential("stored")}).list()

        assert providers["alpha"].source == ProviderSource.CREDENTIAL_STORE
        assert providers["alpha"].options["api_key"] == "stored"

    @pytest.mark.asyncio
    async def test_user_config_wins_over_env(self, make_manager):
        manager = make_manager(
            config=alpha_options(api_key="config-key"),
            environ={"ALPHA_API_KEY": "env-key"},
        )
        alpha = (await manager.list())["alpha"]

        assert alpha.options["api_key"] == "config-key"
        assert alpha.source == ProviderSource.USER_CONFIG

    @pytest.mark.asyncio
    async def test_configured_base_url_kept(self, make_manager):
        manager = make_manager(config=alpha_options(base_url="https://proxy.example"))
        alpha = (await manager.list())["alpha"]

        assert alpha.options["base_url"] == "https://proxy.example"

    @pytest.mark.asyncio
    async def test_hook_autoload(self, make_manager):
        providers = await make_manager(loaders={"beta": autoload}).list()

        assert providers["beta"].source == ProviderSource.CUSTOM_LOADER
        assert providers["beta"].options == {"from_hook": True}

    @pytest.mark.asyncio
    async def test_hook_options_merge_into_active_provider(self, make_manager):
        async def passive(provider, ctx):
            return LoaderResult(options={"headers": {"X": "1"}})

        providers = await make_manager(
            loaders={"alpha": passive, "beta": passive},
            environ={"ALPHA_API_KEY": "k"},
        ).list()

        assert providers["alpha"].options["headers"] == {"X": "1"}
        assert providers["alpha"].options["api_key"] == "k"
        assert "beta" not in providers

    @pytest.mark.asyncio
    async def test_hook_for_unknown_provider_ignored(self, make_manager):
        assert await make_manager(loaders={"ghost": autoload}).list() == {}

    @pytest.mark.asyncio
    async def test_hooks_run_once_per_build(self, make_manager):
        calls = []

        async def counting(provider, ctx):
            calls.append(provider.id)
            return LoaderResult(autoload=True)

        manager = make_manager(loaders={"alpha": counting})
        await manager.list()
        await manager.get_provider("alpha")

        assert calls == ["alpha"]


class TestIsolationAndDisable:
    @pytest.mark.asyncio
    async def test_hook_failure_is_isolated(self, make_manager):
        async def broken(provider, ctx):
            raise RuntimeError("hook exploded")

        manager = make_manager(
            loaders={"alpha": broken, "beta": autoload},
            environ={"ALPHA_API_KEY": "k"},
        )
        state = await manager.state()

        assert set(state.providers) == {"alpha", "beta"}
        failure = state.hook_failures["alpha"]
        assert isinstance(failure.cause, RuntimeError)
        assert failure.provider_id == "alpha"

    @pytest.mark.asyncio
    async def test_disabled_provider_skipped_everywhere(self, make_manager):
        config = ResolverConfig(
            disabled_providers=["alpha", "beta"],
            provider={"alpha": ProviderConfig(options={"api_key": "x"})},
        )
        manager = make_manager(
            config=config,
            environ={"ALPHA_API_KEY": "k"},
            credentials={"alpha": api_credential("stored")},
            loaders={"beta": autoload},
        )
        assert await manager.list() == {}


class TestModelFiltering:
    @pytest.mark.asyncio
    async def test_deprecated_and_prerelease_removed(self, make_manager):
        alpha = (await make_manager(environ={"ALPHA_API_KEY": "k"}).list())["alpha"]

        assert set(alpha.info.models) == {"alpha-large", "alpha-mini"}

    @pytest.mark.asyncio
    async def test_experimental_flag_keeps_prerelease_only(self, make_manager):
        manager = make_manager(
            config=ResolverConfig(experimental_models=True),
            environ={"ALPHA_API_KEY": "k"},
        )
        alpha = (await manager.list())["alpha"]

        assert "alpha-next" in alpha.info.models
        assert "alpha-old" not in alpha.info.models

    @pytest.mark.asyncio
    async def test_provider_without_models_dropped(self, make_manager):
        catalog = StaticCatalog.from_dict(
            {
                "stale": {
                    "env": ["STALE_KEY"],
                    "models": {"old": {"status": "deprecated"}},
                }
            }
        )
        manager = make_manager(environ={"STALE_KEY": "k"}, catalog_source=catalog)

        assert await manager.list() == {}

    @pytest.mark.asyncio
    async def test_denylisted_model_removed(self, make_manager):
        catalog = StaticCatalog.from_dict(
            {
                "gamma": {
                    "env": ["GAMMA_KEY"],
                    "models": {"gpt-5-chat-latest": {}, "gpt-5": {}},
                }
            }
        )
        manager = make_manager(environ={"GAMMA_KEY": "k"}, catalog_source=catalog)

        assert set((await manager.list())["gamma"].info.models) == {"gpt-5"}


class TestConfigMerge:
    """User provider and model definitions layered on the catalog."""

    @pytest.mark.asyncio
    async def test_alias_model(self, make_manager):
        config = ResolverConfig(
            provider={"alpha": ProviderConfig(models={"fast": ModelConfig(id="alpha-mini")})}
        )
        alpha = (await make_manager(config=config).list())["alpha"]

        fast = alpha.info.models["fast"]
        assert fast.alias_target_id == "alpha-mini"
        assert fast.upstream_id == "alpha-mini"
        assert fast.name == "fast"
        assert fast.cost.input == 0.1

    @pytest.mark.asyncio
    async def test_provider_defined_only_in_config(self, make_manager, fake_package):
        config = ResolverConfig(
            provider={
                "mine": ProviderConfig(
                    name="My Provider",
                    package=fake_package.ref,
                    models={"m1": ModelConfig()},
                    options={"api_key": "mine-key"},
                )
            }
        )
        mine = (await make_manager(config=config).list())["mine"]

        assert mine.info.name == "My Provider"
        assert mine.info.models["m1"].name == "m1"
        assert mine.options == {"api_key": "mine-key"}

    def test_merge_overrides_catalog_fields(self):
        base = ProviderDescriptor(id="alpha", name="Alpha", env=["ALPHA_API_KEY"])
        merged = merge_provider_config(
            "alpha", ProviderConfig(env=["OTHER"], api="https://x.example"), base
        )

        assert merged.name == "Alpha"
        assert merged.env == ["OTHER"]
        assert merged.api == "https://x.example"

    def test_model_overrides_keep_catalog_values(self, catalog_descriptor):
        merged = merge_provider_config(
            "alpha",
            ProviderConfig(models={"alpha-large": ModelConfig(reasoning=True)}),
            catalog_descriptor,
        )
        large = merged.models["alpha-large"]

        assert large.reasoning is True
        assert large.name == "Alpha Large"
        assert large.cost.output == 15
        assert "alpha-mini" in merged.models

    @pytest.fixture
    def catalog_descriptor(self):
        return parse_catalog(catalog_data("pkg"))["alpha"]


class TestEnterpriseVariant:
    def test_synthesized_from_copilot(self):
        catalog = {
            "github-copilot": ProviderDescriptor(
                id="github-copilot", name="GitHub Copilot", api="https://api.githubcopilot.com"
            )
        }
        add_enterprise_variant(catalog)

        enterprise = catalog["github-copilot-enterprise"]
        assert enterprise.id == "github-copilot-enterprise"
        assert enterprise.name == "GitHub Copilot Enterprise"
        assert enterprise.api is None
        assert catalog["github-copilot"].api == "https://api.githubcopilot.com"

    def test_existing_entry_kept(self):
        existing = ProviderDescriptor(id="github-copilot-enterprise", name="Custom")
        catalog = {
            "github-copilot": ProviderDescriptor(id="github-copilot", name="GitHub Copilot"),
            "github-copilot-enterprise": existing,
        }
        add_enterprise_variant(catalog)

        assert catalog["github-copilot-enterprise"] is existing

    def test_no_copilot(self):
        catalog: dict = {}
        add_enterprise_variant(catalog)
        assert catalog == {}
