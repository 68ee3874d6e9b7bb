# src/provider_resolver/catalog/models.py
"""
Catalog descriptor models.

Pydantic models describing providers and the models they serve. Raw
catalog entries (models.dev format) are accepted as-is: npm package names
are mapped to Python client packages and the ``experimental`` flag is
folded into the lifecycle status.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from provider_resolver.config.defaults import (
    DEFAULT_CLIENT_PACKAGE,
    LOCAL_PACKAGE_PREFIX,
    NPM_PACKAGE_MAP,
)
from provider_resolver.config.enums import LifecycleStatus, Modality


def python_package_for(package: str | None) -> str | None:
    """Map a catalog package name to the Python client package serving it."""
    if package is None:
        return None
    if package.startswith(LOCAL_PACKAGE_PREFIX) or not package.startswith("@"):
        return package
    return NPM_PACKAGE_MAP.get(package, DEFAULT_CLIENT_PACKAGE)


class ModelCost(BaseModel):
    """Price per million tokens. All zero when unknown or free."""

    input: float = 0
    output: float = 0
    cache_read: float = 0
    cache_write: float = 0

    @property
    def is_free(self) -> bool:
        return self.input == 0


class ModelLimit(BaseModel):
    """Token limits. Zero means unknown."""

    context: int = 0
    output: int = 0


class ModelModalities(BaseModel):
    """Modalities accepted and produced by a model."""

    input: list[Modality] = Field(default_factory=lambda: [Modality.TEXT])
    output: list[Modality] = Field(default_factory=lambda: [Modality.TEXT])


class ModelDescriptor(BaseModel):
    """A single model offered by a provider."""

    id: str = Field(..., description="Model key within its provider")
    name: str = Field(..., description="Human-readable model name")
    release_date: Optional[str] = None
    attachment: bool = False
    reasoning: bool = False
    temperature: bool = False
    tool_call: bool = True
    cost: ModelCost = Field(default_factory=ModelCost)
    limit: ModelLimit = Field(default_factory=ModelLimit)
    modalities: ModelModalities = Field(default_factory=ModelModalities)
    status: LifecycleStatus = LifecycleStatus.STABLE
    options: dict[str, Any] = Field(default_factory=dict)
    headers: Optional[dict[str, str]] = None
    package: Optional[str] = Field(
        None, description="Client package override for this model only"
    )
    alias_target_id: Optional[str] = Field(
        None, description="Real upstream id when the configured key differs"
    )

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def normalize_catalog_entry(cls, data: Any) -> Any:
        """Accept models.dev shaped entries."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("experimental") and not data.get("status"):
            data["status"] = LifecycleStatus.EXPERIMENTAL
        provider = data.pop("provider", None)
        if isinstance(provider, dict) and provider.get("npm") and not data.get("package"):
            data["package"] = provider["npm"]
        if data.get("package"):
            data["package"] = python_package_for(data["package"])
        data.setdefault("name", data.get("id"))
        return data

    @property
    def upstream_id(self) -> str:
        """Id to send to the provider's client."""
        return self.alias_target_id or self.id

    @property
    def is_free(self) -> bool:
        return self.cost.is_free


class ProviderDescriptor(BaseModel):
    """Static description of a provider and its models."""

    id: str = Field(..., description="Provider identifier")
    name: str = Field(..., description="Display name")
    package: Optional[str] = Field(None, description="Python client package")
    env: list[str] = Field(
        default_factory=list, description="Env vars that may hold the API key"
    )
    api: Optional[str] = Field(None, description="Default endpoint URL")
    models: dict[str, ModelDescriptor] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def normalize_catalog_entry(cls, data: Any) -> Any:
        """Accept models.dev shaped entries (``npm`` instead of ``package``)."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        npm = data.pop("npm", None)
        if npm and not data.get("package"):
            data["package"] = npm
        if data.get("package"):
            data["package"] = python_package_for(data["package"])
        data.setdefault("name", data.get("id"))
        return data

    @property
    def package_ref(self) -> str:
        """Client package to acquire; chuk-llm serves providers by id."""
        return self.package or DEFAULT_CLIENT_PACKAGE

    def free_models(self) -> dict[str, ModelDescriptor]:
        return {key: model for key, model in self.models.items() if model.is_free}
