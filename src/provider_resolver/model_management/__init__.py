# src/provider_resolver/model_management/__init__.py
"""
Model management package for provider-resolver.

This package turns catalog, configuration, credentials and loader hooks
into active providers, and providers into ready-to-invoke models:
- Provider state build (single-flight, per-layer precedence)
- Custom loader hooks, including region-aware model id rewriting
- Client acquisition and caching
- ModelManager for orchestrating everything
"""

from provider_resolver.model_management.client_factory import ClientAcquisition
from provider_resolver.model_management.clients import LanguageModel
from provider_resolver.model_management.errors import (
    HookFailure,
    InitError,
    ModelNotFoundError,
    NoSuchModelError,
    PackageInstallError,
    ProviderError,
)
from provider_resolver.model_management.loaders import (
    CUSTOM_LOADERS,
    LoaderContext,
    LoaderResult,
)
from provider_resolver.model_management.model_manager import ModelManager
from provider_resolver.model_management.packages import PackageInstaller
from provider_resolver.model_management.ranking import ModelRef, parse_model, sort_models
from provider_resolver.model_management.region import rewrite_model_id
from provider_resolver.model_management.state import (
    ActiveProvider,
    ProviderState,
    ProviderStateBuilder,
    ResolvedModel,
)

__all__ = [
    "ActiveProvider",
    "ClientAcquisition",
    "CUSTOM_LOADERS",
    "HookFailure",
    "InitError",
    "LanguageModel",
    "LoaderContext",
    "LoaderResult",
    "ModelManager",
    "ModelNotFoundError",
    "ModelRef",
    "NoSuchModelError",
    "PackageInstallError",
    "PackageInstaller",
    "ProviderError",
    "ProviderState",
    "ProviderStateBuilder",
    "ResolvedModel",
    "parse_model",
    "rewrite_model_id",
    "sort_models",
]
