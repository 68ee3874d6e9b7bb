# src/provider_resolver/model_management/loaders.py
"""
Custom loader hooks.

Each known provider can register one async hook. During the state build the
hook receives the provider's (merged) catalog descriptor and decides:

- ``autoload``: activate the provider even if no other layer did
- ``options``: connection options merged into the provider's options
- ``get_model``: optional replacement for the client's default model lookup

Hooks are registered explicitly in ``CUSTOM_LOADERS``; there is no
discovery by name.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from provider_resolver.auth.credentials import CredentialSource
from provider_resolver.catalog.models import ProviderDescriptor
from provider_resolver.config.defaults import (
    ANTHROPIC_BETA_FEATURES,
    ATTRIBUTION_HEADERS,
    DEFAULT_BEDROCK_REGION,
    DEFAULT_VERTEX_ANTHROPIC_LOCATION,
    DEFAULT_VERTEX_LOCATION,
    PROVIDER_ANTHROPIC,
    PROVIDER_AZURE,
    PROVIDER_AZURE_COGNITIVE,
    PROVIDER_BEDROCK,
    PROVIDER_OPENAI,
    PROVIDER_OPENCODE,
    PROVIDER_OPENROUTER,
    PROVIDER_VERCEL,
    PROVIDER_VERTEX,
    PROVIDER_VERTEX_ANTHROPIC,
    PROVIDER_ZENMUX,
    PUBLIC_API_KEY,
)
from provider_resolver.config.env_vars import EnvVar, get_env, get_first_env
from provider_resolver.model_management.region import rewrite_model_id

logger = logging.getLogger(__name__)

# (client, upstream model id, provider options) -> language model handle
ModelGetter = Callable[[Any, str, Mapping[str, Any]], Awaitable[Any]]


@dataclass
class LoaderResult:
    """What a hook contributes to its provider."""

    autoload: bool = False
    options: dict[str, Any] = field(default_factory=dict)
    get_model: ModelGetter | None = None


@dataclass
class LoaderContext:
    """Read-only view of the world handed to every hook."""

    environ: Mapping[str, str]
    credentials: CredentialSource

    def get_env(self, var: EnvVar | str) -> str | None:
        if isinstance(var, EnvVar):
            return get_env(var, environ=self.environ)
        return self.environ.get(var)

    async def has_credential(self, provider_id: str) -> bool:
        return await self.credentials.get(provider_id) is not None


CustomLoader = Callable[
    [ProviderDescriptor | None, LoaderContext], Awaitable[LoaderResult]
]


# ── Model getters ────────────────────────────────────────────────────────────


async def _responses_model(client: Any, model_id: str, options: Mapping[str, Any]) -> Any:
    return client.responses(model_id)


async def _azure_model(client: Any, model_id: str, options: Mapping[str, Any]) -> Any:
    if options.get("use_completion_urls"):
        return client.chat(model_id)
    return client.responses(model_id)


async def _trimmed_model(client: Any, model_id: str, options: Mapping[str, Any]) -> Any:
    return client.language_model(str(model_id).strip())


# ── Hooks ────────────────────────────────────────────────────────────────────


async def load_anthropic(
    provider: ProviderDescriptor | None, ctx: LoaderContext
) -> LoaderResult:
    """Opt in to Anthropic beta features."""
    return LoaderResult(
        options={"headers": {"anthropic-beta": ANTHROPIC_BETA_FEATURES}},
    )


async def load_opencode(
    provider: ProviderDescriptor | None, ctx: LoaderContext
) -> LoaderResult:
    """
    Without a key only the free models are usable.

    Paid models are removed from the descriptor in place; the provider
    autoloads when anything is left, authenticating with the public key.
    """
    if provider is None:
        return LoaderResult()

    has_key = any(ctx.get_env(name) for name in provider.env) or (
        await ctx.has_credential(provider.id)
    )
    if not has_key:
        provider.models = provider.free_models()
        logger.debug(
            f"{provider.id}: no key, keeping {len(provider.models)} free models"
        )

    return LoaderResult(
        autoload=bool(provider.models),
        options={} if has_key else {"api_key": PUBLIC_API_KEY},
    )


async def load_openai(
    provider: ProviderDescriptor | None, ctx: LoaderContext
) -> LoaderResult:
    """OpenAI models go through the Responses API."""
    return LoaderResult(get_model=_responses_model)


async def load_azure(
    provider: ProviderDescriptor | None, ctx: LoaderContext
) -> LoaderResult:
    return LoaderResult(get_model=_azure_model)


async def load_azure_cognitive_services(
    provider: ProviderDescriptor | None, ctx: LoaderContext
) -> LoaderResult:
    resource = ctx.get_env(EnvVar.AZURE_COGNITIVE_SERVICES_RESOURCE_NAME)
    options: dict[str, Any] = {}
    if resource:
        options["base_url"] = f"https://{resource}.cognitiveservices.azure.com/openai"
    return LoaderResult(options=options, get_model=_azure_model)


async def load_amazon_bedrock(
    provider: ProviderDescriptor | None, ctx: LoaderContext
) -> LoaderResult:
    """Autoload when AWS credentials are present; prefix ids for the region."""
    has_aws = any(
        ctx.get_env(var)
        for var in (
            EnvVar.AWS_PROFILE,
            EnvVar.AWS_ACCESS_KEY_ID,
            EnvVar.AWS_BEARER_TOKEN_BEDROCK,
        )
    )
    if not has_aws:
        return LoaderResult()

    region = ctx.get_env(EnvVar.AWS_REGION) or DEFAULT_BEDROCK_REGION
    options: dict[str, Any] = {"region": region}
    profile = ctx.get_env(EnvVar.AWS_PROFILE)
    if profile:
        options["profile"] = profile

    async def get_model(client: Any, model_id: str, opts: Mapping[str, Any]) -> Any:
        return client.language_model(rewrite_model_id(region, model_id))

    return LoaderResult(autoload=True, options=options, get_model=get_model)


def _attribution_loader() -> CustomLoader:
    async def load(
        provider: ProviderDescriptor | None, ctx: LoaderContext
    ) -> LoaderResult:
        return LoaderResult(options={"headers": dict(ATTRIBUTION_HEADERS)})

    return load


def _vertex_loader(default_location: str) -> CustomLoader:
    async def load(
        provider: ProviderDescriptor | None, ctx: LoaderContext
    ) -> LoaderResult:
        project = get_first_env(
            EnvVar.GOOGLE_CLOUD_PROJECT,
            EnvVar.GCP_PROJECT,
            EnvVar.GCLOUD_PROJECT,
            environ=ctx.environ,
        )
        if not project:
            return LoaderResult()
        location = get_first_env(
            EnvVar.GOOGLE_CLOUD_LOCATION,
            EnvVar.VERTEX_LOCATION,
            default=default_location,
            environ=ctx.environ,
        )
        return LoaderResult(
            autoload=True,
            options={"project": project, "location": location},
            get_model=_trimmed_model,
        )

    return load


CUSTOM_LOADERS: dict[str, CustomLoader] = {
    PROVIDER_ANTHROPIC: load_anthropic,
    PROVIDER_OPENCODE: load_opencode,
    PROVIDER_OPENAI: load_openai,
    PROVIDER_AZURE: load_azure,
    PROVIDER_AZURE_COGNITIVE: load_azure_cognitive_services,
    PROVIDER_BEDROCK: load_amazon_bedrock,
    PROVIDER_OPENROUTER: _attribution_loader(),
    PROVIDER_VERCEL: _attribution_loader(),
    PROVIDER_VERTEX: _vertex_loader(DEFAULT_VERTEX_LOCATION),
    PROVIDER_VERTEX_ANTHROPIC: _vertex_loader(DEFAULT_VERTEX_ANTHROPIC_LOCATION),
    PROVIDER_ZENMUX: _attribution_loader(),
}
"""Provider id -> hook. Every hook runs at most once per build."""
