# src/provider_resolver/model_management/clients.py
"""
Client adapters.

Every acquired client package is wrapped in a ``ClientFactory`` so the
rest of the resolver sees one shape:

    factory.create(name, **options) -> ProviderClient
    client.language_model(model_id) -> LanguageModel

The OpenAI, Anthropic and chuk-llm SDKs get dedicated adapters. Any other
package (typically a local ``file://`` module) must expose exactly one
``create_*`` callable that accepts ``name`` plus the provider options and
returns an object with a ``language_model(model_id)`` method.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

import httpx

from provider_resolver.config.defaults import (
    CHUK_PROVIDER_NAMES,
    DEFAULT_AZURE_API_VERSION,
    FACTORY_PREFIX,
    PROVIDER_AZURE,
    PROVIDER_AZURE_COGNITIVE,
)
from provider_resolver.model_management.errors import NoSuchModelError
from provider_resolver.model_management.fetch import Fetch, FetchTransport

logger = logging.getLogger(__name__)

_AZURE_PROVIDERS = frozenset({PROVIDER_AZURE, PROVIDER_AZURE_COGNITIVE})


@dataclass(frozen=True)
class LanguageModel:
    """Ready-to-invoke model handle: an SDK client plus the model to call."""

    provider_id: str
    model_id: str
    client: Any
    api: str = "chat"
    settings: Mapping[str, Any] = field(default_factory=dict)


@runtime_checkable
class ProviderClient(Protocol):
    def language_model(self, model_id: str) -> Any:
        ...


@runtime_checkable
class ClientFactory(Protocol):
    def create(self, name: str, **options: Any) -> ProviderClient:
        ...


def _http_client(fetch: Optional[Fetch]) -> httpx.AsyncClient | None:
    if fetch is None:
        return None
    return httpx.AsyncClient(transport=FetchTransport(fetch))


def _sdk_kwargs(**values: Any) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


async def close_client(client: Any) -> None:
    """Close a provider client if it holds connections."""
    close = getattr(client, "aclose", None)
    if close is None:
        return
    try:
        await close()
    except Exception as e:
        logger.warning(f"Error closing client {client!r}: {e}")


# ── OpenAI ───────────────────────────────────────────────────────────────────


class OpenAIClient:
    """OpenAI (and Azure OpenAI) client; models via chat or responses."""

    def __init__(self, provider_id: str, sdk: Any, include_usage: bool = False) -> None:
        self.provider_id = provider_id
        self.sdk = sdk
        self.include_usage = include_usage

    def _model(self, model_id: str, api: str) -> LanguageModel:
        settings = {"include_usage": True} if self.include_usage else {}
        return LanguageModel(self.provider_id, model_id, self.sdk, api, settings)

    def chat(self, model_id: str) -> LanguageModel:
        return self._model(model_id, "chat")

    def responses(self, model_id: str) -> LanguageModel:
        return self._model(model_id, "responses")

    def language_model(self, model_id: str) -> LanguageModel:
        return self.chat(model_id)

    async def aclose(self) -> None:
        await self.sdk.close()


class OpenAIClientFactory:
    def __init__(self, module: ModuleType) -> None:
        self.module = module

    def create(self, name: str, **options: Any) -> OpenAIClient:
        kwargs = _sdk_kwargs(
            api_key=options.get("api_key"),
            default_headers=options.get("headers"),
            http_client=_http_client(options.get("fetch")),
        )
        if name in _AZURE_PROVIDERS:
            sdk = self.module.AsyncAzureOpenAI(
                azure_endpoint=options.get("base_url"),
                api_version=options.get("api_version", DEFAULT_AZURE_API_VERSION),
                **kwargs,
            )
        else:
            sdk = self.module.AsyncOpenAI(base_url=options.get("base_url"), **kwargs)
        return OpenAIClient(name, sdk, include_usage=bool(options.get("include_usage")))


# ── Anthropic ────────────────────────────────────────────────────────────────


class AnthropicClient:
    def __init__(self, provider_id: str, sdk: Any) -> None:
        self.provider_id = provider_id
        self.sdk = sdk

    def language_model(self, model_id: str) -> LanguageModel:
        return LanguageModel(self.provider_id, model_id, self.sdk, "messages")

    async def aclose(self) -> None:
        await self.sdk.close()


class AnthropicClientFactory:
    """Anthropic SDK; the ``anthropic.lib.vertex`` module yields a Vertex client."""

    def __init__(self, module: ModuleType) -> None:
        self.module = module

    def create(self, name: str, **options: Any) -> AnthropicClient:
        kwargs = _sdk_kwargs(
            default_headers=options.get("headers"),
            http_client=_http_client(options.get("fetch")),
        )
        if self.module.__name__.endswith(".vertex"):
            sdk = self.module.AsyncAnthropicVertex(
                region=options.get("location"),
                project_id=options.get("project"),
                **kwargs,
            )
        else:
            sdk = self.module.AsyncAnthropic(
                **_sdk_kwargs(
                    api_key=options.get("api_key"),
                    base_url=options.get("base_url"),
                ),
                **kwargs,
            )
        return AnthropicClient(name, sdk)


# ── chuk-llm ─────────────────────────────────────────────────────────────────


class ChukLLMClient:
    """
    Provider served through chuk-llm.

    chuk-llm builds one client per model, so construction happens in
    ``language_model``; a model chuk-llm rejects is reported as
    ``NoSuchModelError``.
    """

    def __init__(
        self,
        provider_id: str,
        get_client: Any,
        api_key: str | None = None,
        api_base: str | None = None,
    ) -> None:
        self.provider_id = provider_id
        self.chuk_provider = CHUK_PROVIDER_NAMES.get(provider_id, provider_id)
        self._get_client = get_client
        self._credentials = _sdk_kwargs(api_key=api_key, api_base=api_base)

    def language_model(self, model_id: str) -> LanguageModel:
        try:
            client = self._get_client(
                provider=self.chuk_provider, model=model_id, **self._credentials
            )
        except ValueError as e:
            raise NoSuchModelError(model_id) from e
        logger.debug(f"Created chuk_llm client for {self.chuk_provider}/{model_id}")
        return LanguageModel(self.provider_id, model_id, client, "chuk_llm")


class ChukLLMClientFactory:
    def __init__(self, module: ModuleType) -> None:
        self.module = module

    def create(self, name: str, **options: Any) -> ChukLLMClient:
        return ChukLLMClient(
            name,
            self.module.get_client,
            api_key=options.get("api_key"),
            api_base=options.get("base_url"),
        )


# ── Generic modules ──────────────────────────────────────────────────────────


class ModuleClientFactory:
    """Adapter for a module exposing a single ``create_*`` factory."""

    def __init__(self, module: ModuleType) -> None:
        self.module = module
        self.factory = find_factory(module)

    def create(self, name: str, **options: Any) -> ProviderClient:
        return self.factory(name=name, **options)


def find_factory(module: ModuleType) -> Any:
    """Return the module's sole public ``create_*`` callable."""
    names = getattr(module, "__all__", None) or [
        n for n in vars(module) if not n.startswith("_")
    ]
    factories = [
        n for n in names
        if n.startswith(FACTORY_PREFIX) and callable(getattr(module, n, None))
    ]
    if len(factories) != 1:
        raise TypeError(
            f"{module.__name__} must expose exactly one {FACTORY_PREFIX}* factory, "
            f"found {factories or 'none'}"
        )
    return getattr(module, factories[0])


_ADAPTERS: dict[str, type] = {
    "openai": OpenAIClientFactory,
    "anthropic": AnthropicClientFactory,
    "chuk_llm": ChukLLMClientFactory,
}


def resolve_factory(module: ModuleType) -> ClientFactory:
    """Pick the adapter for an imported client module."""
    adapter = _ADAPTERS.get(module.__name__.split(".")[0], ModuleClientFactory)
    return adapter(module)
