# src/provider_resolver/model_management/model_manager.py
"""
ModelManager - disposable owner of provider state and its caches.

This module provides the ModelManager class that orchestrates:
- The single-flight provider state build
- Per provider/model resolution (memoized)
- Client acquisition (through the state's ClientAcquisition)
- Small and default model selection

Nothing here is module-global: every ModelManager builds its own state,
and ``dispose()`` discards it so the next call starts a fresh cycle.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from provider_resolver.auth.credentials import (
    CredentialSource,
    CredentialStore,
    default_auth_path,
)
from provider_resolver.catalog.source import CatalogSource, ModelsDevCatalog
from provider_resolver.config.models import ConfigSource, FileConfigSource
from provider_resolver.model_management.errors import (
    ModelNotFoundError,
    NoSuchModelError,
    ProviderError,
)
from provider_resolver.model_management.loaders import CUSTOM_LOADERS, CustomLoader
from provider_resolver.model_management.packages import PackageInstaller
from provider_resolver.model_management.ranking import (
    ModelRef,
    parse_model,
    small_model_priority,
    sort_models,
)
from provider_resolver.model_management.state import (
    ActiveProvider,
    ProviderState,
    ProviderStateBuilder,
    ResolvedModel,
)
from provider_resolver.utils.single_flight import SingleFlight

logger = logging.getLogger(__name__)

_STATE_KEY = "state"


class ModelManager:
    """
    Resolves providers and models from the configured collaborators.

    Every collaborator can be injected; the defaults read the user's config
    file, credential store and the models.dev catalog.
    """

    def __init__(
        self,
        config_source: ConfigSource | None = None,
        credentials: CredentialSource | None = None,
        catalog: CatalogSource | None = None,
        loaders: Mapping[str, CustomLoader] | None = None,
        installer: PackageInstaller | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        self.config_source = config_source or FileConfigSource(environ=self.environ)
        self.credentials = credentials or CredentialStore(default_auth_path(self.environ))
        self.catalog = catalog or ModelsDevCatalog(environ=self.environ)
        self.loaders = CUSTOM_LOADERS if loaders is None else loaders
        self.installer = installer or PackageInstaller(environ=self.environ)
        self._state: SingleFlight[ProviderState] = SingleFlight()

    # ── State ─────────────────────────────────────────────────────────────────

    async def state(self) -> ProviderState:
        """The provider state, built once; concurrent callers share the build."""
        return await self._state.do(_STATE_KEY, self._build)

    async def _build(self) -> ProviderState:
        builder = ProviderStateBuilder(
            catalog=self.catalog,
            config_source=self.config_source,
            credentials=self.credentials,
            loaders=self.loaders,
            installer=self.installer,
            environ=self.environ,
        )
        return await builder.build()

    async def dispose(self) -> None:
        """Discard the state and close every client hanging off it."""
        state = self._state.get(_STATE_KEY)
        self._state.clear()
        if state is not None:
            await state.discard()
        logger.debug("Disposed provider state")

    async def __aenter__(self) -> ModelManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()
        close = getattr(self.catalog, "aclose", None)
        if close is not None:
            await close()

    # ── Providers ─────────────────────────────────────────────────────────────

    async def list(self) -> dict[str, ActiveProvider]:
        """Active providers keyed by id."""
        return (await self.state()).providers

    async def get_provider(self, provider_id: str) -> ActiveProvider | None:
        return (await self.state()).providers.get(provider_id)

    # ── Models ────────────────────────────────────────────────────────────────

    async def get_model(self, provider_id: str, model_id: str) -> ResolvedModel:
        """
        Resolve a model to a language model handle.

        Memoized per ``provider/model``: repeated calls return the same object.

        Raises:
            ModelNotFoundError: Unknown provider/model, or the client rejected it
            InitError: The provider's client could not be created
        """
        state = await self.state()
        return await state.models.do(
            f"{provider_id}/{model_id}",
            lambda: self._resolve(state, provider_id, model_id),
        )

    async def _resolve(
        self, state: ProviderState, provider_id: str, model_id: str
    ) -> ResolvedModel:
        logger.info(f"getModel {provider_id}/{model_id}")

        provider = state.providers.get(provider_id)
        if provider is None:
            raise ModelNotFoundError(provider_id, model_id)
        info = provider.info.models.get(model_id)
        if info is None:
            raise ModelNotFoundError(provider_id, model_id)

        client = await state.clients.acquire(provider.info, info, provider.options)

        try:
            if provider.get_model is not None:
                language = await provider.get_model(client, info.upstream_id, provider.options)
            else:
                language = client.language_model(info.upstream_id)
        except NoSuchModelError as e:
            raise ModelNotFoundError(provider_id, model_id) from e

        logger.info(f"found {provider_id}/{model_id}")
        return ResolvedModel(
            provider_id=provider_id,
            model_id=model_id,
            info=info,
            language=language,
            package=info.package or provider.info.package,
        )

    async def get_small_model(self, provider_id: str) -> ResolvedModel | None:
        """
        A lightweight model for background tasks (titles, summaries).

        The configured small model wins; otherwise the provider's first model
        matching the small-model priority list, or None.
        """
        state = await self.state()
        if state.config.small_model:
            ref = parse_model(state.config.small_model)
            return await self.get_model(ref.provider_id, ref.model_id)

        provider = state.providers.get(provider_id)
        if provider is None:
            return None

        for fragment in small_model_priority(provider_id):
            for model_id in provider.info.models:
                if fragment in model_id:
                    return await self.get_model(provider_id, model_id)
        return None

    async def default_model(self) -> ModelRef:
        """
        The model to use when the caller names none.

        Raises:
            ProviderError: If no provider or no model is available
        """
        state = await self.state()
        if state.config.model:
            return parse_model(state.config.model)

        # Configured providers act as an allowlist
        allowed = set(state.config.provider)
        provider = next(
            (p for p in state.providers.values() if not allowed or p.id in allowed),
            None,
        )
        if provider is None:
            raise ProviderError("no providers found")

        ranked = sort_models(provider.info.models.values())
        if not ranked:
            raise ProviderError("no models found")
        return ModelRef(provider.id, ranked[0].id)
