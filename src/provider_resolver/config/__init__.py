# src/provider_resolver/config/__init__.py
"""
Configuration for provider-resolver.

Constants live in ``defaults``, env access in ``env_vars`` and the Pydantic
configuration models in ``models``. Only the leaf modules are re-exported
here; import ``provider_resolver.config.models`` directly for the models.
"""

from provider_resolver.config.enums import (
    CredentialType,
    LifecycleStatus,
    Modality,
    ProviderSource,
)
from provider_resolver.config.env_vars import (
    EnvVar,
    get_env,
    get_env_bool,
    get_env_list,
    get_first_env,
)
from provider_resolver.config.logging import get_logger, setup_logging

__all__ = [
    "CredentialType",
    "EnvVar",
    "LifecycleStatus",
    "Modality",
    "ProviderSource",
    "get_env",
    "get_env_bool",
    "get_env_list",
    "get_first_env",
    "get_logger",
    "setup_logging",
]
