# src/provider_resolver/core/model_resolver.py
"""Model and provider resolution utilities."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from provider_resolver.catalog.models import ModelDescriptor
from provider_resolver.model_management import ModelManager
from provider_resolver.model_management.errors import ProviderError
from provider_resolver.model_management.ranking import ModelRef, parse_model, sort_models
from provider_resolver.model_management.state import ActiveProvider, ResolvedModel

logger = logging.getLogger(__name__)


class ModelResolver:
    """Public query surface over a ModelManager."""

    def __init__(self, model_manager: ModelManager | None = None):
        """
        Initialize resolver with optional model manager.

        Args:
            model_manager: ModelManager instance (creates one if not provided)
        """
        self.model_manager = model_manager or ModelManager()

    async def list(self) -> dict[str, ActiveProvider]:
        return await self.model_manager.list()

    async def get_provider(self, provider_id: str) -> ActiveProvider | None:
        return await self.model_manager.get_provider(provider_id)

    async def get_model(self, provider_id: str, model_id: str) -> ResolvedModel:
        return await self.model_manager.get_model(provider_id, model_id)

    async def get_small_model(self, provider_id: str) -> ResolvedModel | None:
        return await self.model_manager.get_small_model(provider_id)

    async def default_model(self) -> ModelRef:
        return await self.model_manager.default_model()

    @staticmethod
    def sort(models: Iterable[ModelDescriptor]) -> list[ModelDescriptor]:
        return sort_models(models)

    @staticmethod
    def parse_model(model: str) -> ModelRef:
        return parse_model(model)

    async def resolve(
        self, provider: str | None = None, model: str | None = None
    ) -> ModelRef:
        """
        Resolve effective provider and model from user input.

        When only a model is given, ``provider/model`` strings are split;
        bare ids are looked up across active providers.

        Args:
            provider: User-specified provider (optional)
            model: User-specified model (optional)

        Returns:
            The effective provider/model pair

        Raises:
            ProviderError: If the provider is unknown or nothing is available
        """
        if provider and model:
            logger.debug(f"Using explicit provider/model: {provider}/{model}")
            return ModelRef(provider, model)

        if provider:
            active = await self.get_provider(provider)
            if active is None:
                raise ProviderError(f"Unknown provider: {provider}")
            ranked = sort_models(active.info.models.values())
            logger.debug(f"Using provider with top model: {provider}/{ranked[0].id}")
            return ModelRef(provider, ranked[0].id)

        if model:
            if "/" in model:
                ref = parse_model(model)
                if await self.get_provider(ref.provider_id) is not None:
                    return ref
            for active in (await self.list()).values():
                if model in active.info.models:
                    logger.debug(f"Detected provider '{active.id}' for model '{model}'")
                    return ModelRef(active.id, model)
            default = await self.default_model()
            logger.warning(
                f"Could not detect provider for model '{model}', "
                f"using default provider '{default.provider_id}'"
            )
            return ModelRef(default.provider_id, model)

        default = await self.default_model()
        logger.debug(f"Using default model: {default}")
        return default

    async def dispose(self) -> None:
        await self.model_manager.dispose()
