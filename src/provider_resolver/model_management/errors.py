# src/provider_resolver/model_management/errors.py
"""
Typed failures raised by provider resolution.

Callers branch on the class; ``to_dict()`` gives a serializable form
(``{"name": ..., "data": {...}}``) for CLIs and RPC layers.
"""

from __future__ import annotations

from typing import Any


class ProviderError(Exception):
    """Base error for all provider-resolver failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)

    @property
    def data(self) -> dict[str, Any]:
        return {"message": str(self)}

    def to_dict(self) -> dict[str, Any]:
        return {"name": type(self).__name__, "data": self.data}


class InitError(ProviderError):
    """
    Acquiring or constructing a provider's client failed.

    The original exception is chained as ``__cause__``. Nothing is cached on
    failure, so the same call may be retried.
    """

    def __init__(self, provider_id: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to initialize provider {provider_id}{detail}")
        self.provider_id = provider_id
        self.cause = cause

    @property
    def data(self) -> dict[str, Any]:
        return {"provider_id": self.provider_id}


class ModelNotFoundError(ProviderError):
    """The model is not in the provider's catalog or the client rejected it."""

    def __init__(self, provider_id: str, model_id: str) -> None:
        super().__init__(f"Model not found: {provider_id}/{model_id}")
        self.provider_id = provider_id
        self.model_id = model_id

    @property
    def data(self) -> dict[str, Any]:
        return {"provider_id": self.provider_id, "model_id": self.model_id}


class HookFailure(ProviderError):
    """A custom loader hook raised; recorded, never propagated from the build."""

    def __init__(self, provider_id: str, cause: BaseException) -> None:
        super().__init__(f"Custom loader for {provider_id} failed: {cause}")
        self.provider_id = provider_id
        self.cause = cause

    @property
    def data(self) -> dict[str, Any]:
        return {"provider_id": self.provider_id, "message": str(self.cause)}


class PackageInstallError(ProviderError):
    """A client package could not be imported or installed."""

    def __init__(self, package: str, detail: str) -> None:
        super().__init__(f"Could not install {package}: {detail}")
        self.package = package
        self.detail = detail

    @property
    def data(self) -> dict[str, Any]:
        return {"package": self.package, "detail": self.detail}


class NoSuchModelError(LookupError):
    """Raised by client adapters when they do not recognise a model id."""

    def __init__(self, model_id: str) -> None:
        super().__init__(f"No such model: {model_id}")
        self.model_id = model_id
