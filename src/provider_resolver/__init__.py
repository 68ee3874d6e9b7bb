# src/provider_resolver/__init__.py
"""
provider-resolver: resolve LLM providers and models from catalog,
configuration, environment and stored credentials.
"""

from provider_resolver.config.defaults import APP_VERSION
from provider_resolver.core.model_resolver import ModelResolver
from provider_resolver.model_management import (
    InitError,
    ModelManager,
    ModelNotFoundError,
    ProviderError,
)

__version__ = APP_VERSION

__all__ = [
    "InitError",
    "ModelManager",
    "ModelNotFoundError",
    "ModelResolver",
    "ProviderError",
    "__version__",
]
