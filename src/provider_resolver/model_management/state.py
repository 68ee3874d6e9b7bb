# src/provider_resolver/model_management/state.py
"""
Provider state: the merged, filtered set of active providers.

``ProviderStateBuilder.build()`` combines the catalog, user configuration,
environment, stored credentials and custom loader hooks, in that order of
precedence (later layers win on conflicting option keys):

1. Catalog descriptors, with user provider/model definitions merged in
2. Environment variables holding a provider's API key
3. Stored API credentials
4. Custom loader hooks (activate on ``autoload`` or if already active)
5. Explicit provider options from user configuration

Finally each active provider's models are filtered and providers left
without models are dropped.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from provider_resolver.auth.credentials import CredentialSource
from provider_resolver.catalog.models import (
    ModelCost,
    ModelDescriptor,
    ModelLimit,
    ModelModalities,
    ProviderDescriptor,
)
from provider_resolver.catalog.source import CatalogSource
from provider_resolver.config.defaults import (
    COPILOT_ENTERPRISE_NAME,
    MODEL_DENYLIST,
    PROVIDER_COPILOT,
    PROVIDER_COPILOT_ENTERPRISE,
    PROVIDER_MODEL_DENYLIST,
)
from provider_resolver.config.enums import CredentialType, LifecycleStatus, ProviderSource
from provider_resolver.config.models import (
    ConfigSource,
    ModelConfig,
    ProviderConfig,
    ResolverConfig,
)
from provider_resolver.model_management.client_factory import ClientAcquisition
from provider_resolver.model_management.errors import HookFailure
from provider_resolver.model_management.loaders import (
    CUSTOM_LOADERS,
    CustomLoader,
    LoaderContext,
    ModelGetter,
)
from provider_resolver.model_management.packages import PackageInstaller
from provider_resolver.utils.merge import deep_merge
from provider_resolver.utils.single_flight import SingleFlight

logger = logging.getLogger(__name__)


@dataclass
class ActiveProvider:
    """A provider that survived the build, with its connection options."""

    source: ProviderSource
    info: ProviderDescriptor
    options: dict[str, Any] = field(default_factory=dict)
    get_model: Optional[ModelGetter] = None

    @property
    def id(self) -> str:
        return self.info.id


@dataclass
class ResolvedModel:
    """A model resolved to a ready-to-invoke language model handle."""

    provider_id: str
    model_id: str
    info: ModelDescriptor
    language: Any
    package: Optional[str] = None


@dataclass
class ProviderState:
    """Everything one build produces, plus the caches that live alongside it."""

    config: ResolverConfig
    providers: dict[str, ActiveProvider]
    clients: ClientAcquisition
    models: SingleFlight[ResolvedModel] = field(default_factory=SingleFlight)
    hook_failures: dict[str, HookFailure] = field(default_factory=dict)

    async def discard(self) -> None:
        """Drop resolved models and close cached clients."""
        self.models.clear()
        await self.clients.clear_cache()


# ── Config merge ─────────────────────────────────────────────────────────────


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def merge_model_config(
    key: str, config: ModelConfig, base: ModelDescriptor | None
) -> ModelDescriptor:
    """Overlay a configured model on its catalog entry (if any)."""
    alias = config.id if config.id and config.id != key else None

    if config.name:
        name = config.name
    elif alias:
        name = key
    else:
        name = base.name if base else key

    if config.cost is None and base is None:
        cost = ModelCost()
    else:
        cost = ModelCost(**{**(base.cost.model_dump() if base else {}), **(config.cost or {})})

    return ModelDescriptor(
        id=key,
        name=name,
        release_date=_first(config.release_date, getattr(base, "release_date", None)),
        attachment=_first(config.attachment, getattr(base, "attachment", None), False),
        reasoning=_first(config.reasoning, getattr(base, "reasoning", None), False),
        temperature=_first(config.temperature, getattr(base, "temperature", None), False),
        tool_call=_first(config.tool_call, getattr(base, "tool_call", None), True),
        cost=cost,
        limit=_first(config.limit, getattr(base, "limit", None), ModelLimit()),
        modalities=_first(
            config.modalities, getattr(base, "modalities", None), ModelModalities()
        ),
        status=_first(config.status, getattr(base, "status", None), LifecycleStatus.STABLE),
        options={**(base.options if base else {}), **config.options},
        headers=_first(config.headers, getattr(base, "headers", None)),
        package=_first(config.package, getattr(base, "package", None)),
        alias_target_id=alias,
    )


def merge_provider_config(
    provider_id: str, config: ProviderConfig, base: ProviderDescriptor | None
) -> ProviderDescriptor:
    """Overlay a configured provider on its catalog entry (if any)."""
    merged = ProviderDescriptor(
        id=provider_id,
        name=_first(config.name, getattr(base, "name", None), provider_id),
        package=_first(config.package, getattr(base, "package", None)),
        env=_first(config.env, getattr(base, "env", None), []),
        api=_first(config.api, getattr(base, "api", None)),
        models=dict(base.models) if base else {},
    )
    for key, model in config.models.items():
        existing = merged.models.get(model.id or key)
        merged.models[key] = merge_model_config(key, model, existing)
    return merged


def add_enterprise_variant(catalog: dict[str, ProviderDescriptor]) -> None:
    """Derive the Copilot Enterprise provider; its endpoint is set at login."""
    copilot = catalog.get(PROVIDER_COPILOT)
    if copilot is None or PROVIDER_COPILOT_ENTERPRISE in catalog:
        return
    catalog[PROVIDER_COPILOT_ENTERPRISE] = copilot.model_copy(
        deep=True,
        update={
            "id": PROVIDER_COPILOT_ENTERPRISE,
            "name": COPILOT_ENTERPRISE_NAME,
            "api": None,
        },
    )


# ── Filtering ────────────────────────────────────────────────────────────────


def is_model_allowed(
    provider_id: str, model_id: str, model: ModelDescriptor, experimental: bool
) -> bool:
    if model_id in MODEL_DENYLIST:
        return False
    if model_id in PROVIDER_MODEL_DENYLIST.get(provider_id, ()):
        return False
    if model.status == LifecycleStatus.DEPRECATED:
        return False
    if model.status.is_prerelease and not experimental:
        return False
    return True


# ── Builder ──────────────────────────────────────────────────────────────────


class ProviderStateBuilder:
    """Runs one build pass over its collaborators."""

    def __init__(
        self,
        catalog: CatalogSource,
        config_source: ConfigSource,
        credentials: CredentialSource,
        loaders: Mapping[str, CustomLoader] | None = None,
        installer: PackageInstaller | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.catalog = catalog
        self.config_source = config_source
        self.credentials = credentials
        self.loaders = CUSTOM_LOADERS if loaders is None else loaders
        self.installer = installer
        self.environ = os.environ if environ is None else environ

    async def build(self) -> ProviderState:
        start = time.perf_counter()
        logger.info("init")

        config = await self.config_source.get()
        catalog = await self.catalog.get()
        disabled = config.disabled
        providers: dict[str, ActiveProvider] = {}
        hook_failures: dict[str, HookFailure] = {}

        def activate(
            provider_id: str,
            options: Mapping[str, Any],
            source: ProviderSource,
            get_model: ModelGetter | None = None,
        ) -> None:
            active = providers.get(provider_id)
            if active is None:
                info = catalog.get(provider_id)
                if info is None:
                    return
                options = dict(options)
                if info.api and not options.get("base_url"):
                    options["base_url"] = info.api
                providers[provider_id] = ActiveProvider(source, info, options, get_model)
                return
            active.options = deep_merge(active.options, options)
            active.source = source
            active.get_model = get_model or active.get_model

        add_enterprise_variant(catalog)
        for provider_id, provider_config in config.provider.items():
            catalog[provider_id] = merge_provider_config(
                provider_id, provider_config, catalog.get(provider_id)
            )

        # Environment
        for provider_id, info in catalog.items():
            if provider_id in disabled:
                continue
            # Only the first listed variable decides activation
            value = self.environ.get(info.env[0]) if info.env else None
            if not value:
                continue
            # A key is only unambiguous when the provider names one variable
            options = {"api_key": value} if len(info.env) == 1 else {}
            activate(provider_id, options, ProviderSource.ENV)

        # Credential store
        for provider_id, credential in (await self.credentials.all()).items():
            if provider_id in disabled:
                continue
            if credential.type == CredentialType.API:
                activate(provider_id, {"api_key": credential.key}, ProviderSource.CREDENTIAL_STORE)

        # Custom loaders
        context = LoaderContext(environ=self.environ, credentials=self.credentials)
        for provider_id, hook in self.loaders.items():
            if provider_id in disabled:
                continue
            try:
                result = await hook(catalog.get(provider_id), context)
            except Exception as e:
                failure = HookFailure(provider_id, e)
                logger.warning(str(failure))
                hook_failures[provider_id] = failure
                continue
            if result.autoload or provider_id in providers:
                activate(provider_id, result.options, ProviderSource.CUSTOM_LOADER, result.get_model)

        # User config
        for provider_id, provider_config in config.provider.items():
            if provider_id in disabled:
                continue
            activate(provider_id, provider_config.options.as_options(), ProviderSource.USER_CONFIG)

        for provider_id in list(providers):
            info = providers[provider_id].info
            info.models = {
                model_id: model
                for model_id, model in info.models.items()
                if is_model_allowed(provider_id, model_id, model, config.experimental_models)
            }
            if not info.models:
                del providers[provider_id]
                continue
            logger.info(f"found {provider_id}")

        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"Provider state built in {elapsed:.1f}ms ({len(providers)} providers)")

        return ProviderState(
            config=config,
            providers=providers,
            clients=ClientAcquisition(self.installer),
            hook_failures=hook_failures,
        )
