"""Configuration enums - no magic strings!"""

from __future__ import annotations

from enum import Enum


class ProviderSource(str, Enum):
    """Which layer last activated or updated a provider (diagnostics only)."""

    ENV = "env"
    CREDENTIAL_STORE = "credential_store"
    CUSTOM_LOADER = "custom_loader"
    USER_CONFIG = "user_config"


class LifecycleStatus(str, Enum):
    """Maturity of a model offering."""

    STABLE = "stable"
    BETA = "beta"
    ALPHA = "alpha"
    EXPERIMENTAL = "experimental"
    DEPRECATED = "deprecated"

    @property
    def is_prerelease(self) -> bool:
        """Hidden unless experimental models are enabled."""
        return self in (LifecycleStatus.ALPHA, LifecycleStatus.EXPERIMENTAL)


class CredentialType(str, Enum):
    """Stored credential kinds."""

    API = "api"
    OAUTH = "oauth"
    WELL_KNOWN = "wellknown"


class Modality(str, Enum):
    """Input/output modalities a model can handle."""

    TEXT = "text"
    AUDIO = "audio"
    IMAGE = "image"
    VIDEO = "video"
    PDF = "pdf"
