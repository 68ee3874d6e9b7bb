"""Stored provider credentials."""

from provider_resolver.auth.credentials import (
    ApiCredential,
    Credential,
    CredentialSource,
    CredentialStore,
    OAuthCredential,
    WellKnownCredential,
)

__all__ = [
    "ApiCredential",
    "Credential",
    "CredentialSource",
    "CredentialStore",
    "OAuthCredential",
    "WellKnownCredential",
]
