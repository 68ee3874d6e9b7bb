"""Environment variable names - centralized, type-safe, no magic strings!

All environment variable access should go through this module.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum


class EnvVar(str, Enum):
    """All environment variable names used by provider-resolver.

    Use these instead of hardcoded strings for type safety. Provider API key
    variables are not listed here; their names come from the catalog.
    """

    # ================================================================
    # Resolver Configuration
    # ================================================================
    CONFIG = "PROVIDER_RESOLVER_CONFIG"
    DATA_DIR = "PROVIDER_RESOLVER_DATA_DIR"
    CACHE_DIR = "PROVIDER_RESOLVER_CACHE_DIR"
    MODEL = "PROVIDER_RESOLVER_MODEL"
    SMALL_MODEL = "PROVIDER_RESOLVER_SMALL_MODEL"
    DISABLED_PROVIDERS = "PROVIDER_RESOLVER_DISABLED_PROVIDERS"
    ENABLE_EXPERIMENTAL_MODELS = "PROVIDER_RESOLVER_ENABLE_EXPERIMENTAL_MODELS"
    DISABLE_AUTOINSTALL = "PROVIDER_RESOLVER_DISABLE_AUTOINSTALL"
    LOG_LEVEL = "PROVIDER_RESOLVER_LOG_LEVEL"

    # ================================================================
    # Catalog
    # ================================================================
    MODELS_DEV_API_JSON = "MODELS_DEV_API_JSON"

    # ================================================================
    # Amazon Bedrock
    # ================================================================
    AWS_PROFILE = "AWS_PROFILE"
    AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
    AWS_BEARER_TOKEN_BEDROCK = "AWS_BEARER_TOKEN_BEDROCK"
    AWS_REGION = "AWS_REGION"

    # ================================================================
    # Google Vertex
    # ================================================================
    GOOGLE_CLOUD_PROJECT = "GOOGLE_CLOUD_PROJECT"
    GCP_PROJECT = "GCP_PROJECT"
    GCLOUD_PROJECT = "GCLOUD_PROJECT"
    GOOGLE_CLOUD_LOCATION = "GOOGLE_CLOUD_LOCATION"
    VERTEX_LOCATION = "VERTEX_LOCATION"

    # ================================================================
    # Azure
    # ================================================================
    AZURE_COGNITIVE_SERVICES_RESOURCE_NAME = "AZURE_COGNITIVE_SERVICES_RESOURCE_NAME"


# ================================================================
# Type-Safe Helper Functions
# ================================================================


def get_env(
    var: EnvVar,
    default: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Get environment variable value (type-safe).

    Args:
        var: EnvVar enum member
        default: Default value if not set
        environ: Mapping to read instead of ``os.environ``

    Returns:
        Environment variable value or default

    Example:
        >>> region = get_env(EnvVar.AWS_REGION, "us-east-1")
    """
    source = os.environ if environ is None else environ
    return source.get(var.value, default)


def get_first_env(
    *variables: EnvVar,
    default: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Return the first non-empty value among several variables.

    Example:
        >>> project = get_first_env(EnvVar.GOOGLE_CLOUD_PROJECT, EnvVar.GCP_PROJECT)
    """
    for var in variables:
        value = get_env(var, environ=environ)
        if value:
            return value
    return default


def get_env_bool(
    var: EnvVar,
    default: bool = False,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Get environment variable as boolean.

    Returns:
        Boolean value (true for "1", "true", "yes", "on", case-insensitive)

    Example:
        >>> enabled = get_env_bool(EnvVar.ENABLE_EXPERIMENTAL_MODELS)
    """
    value = get_env(var, environ=environ)
    if value is None:
        return default

    return value.lower() in ("1", "true", "yes", "on")


def get_env_list(
    var: EnvVar,
    separator: str = ",",
    default: list[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Get environment variable as list of strings.

    Example:
        >>> disabled = get_env_list(EnvVar.DISABLED_PROVIDERS)
        # "openai, anthropic" -> ["openai", "anthropic"]
    """
    value = get_env(var, environ=environ)
    if value is None:
        return default or []

    return [item.strip() for item in value.split(separator) if item.strip()]
