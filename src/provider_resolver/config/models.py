"""Clean Pydantic configuration models - async native, type safe."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, Field, PositiveInt

from provider_resolver.catalog.models import ModelLimit, ModelModalities
from provider_resolver.config.defaults import DEFAULT_CONFIG_DIR, DEFAULT_CONFIG_FILENAME
from provider_resolver.config.enums import LifecycleStatus
from provider_resolver.config.env_vars import (
    EnvVar,
    get_env,
    get_env_bool,
    get_env_list,
)

logger = logging.getLogger(__name__)


class ModelConfig(BaseModel):
    """User override for one model. Unset fields fall back to the catalog."""

    id: Optional[str] = Field(
        None, description="Real upstream id, when it differs from the key"
    )
    name: Optional[str] = None
    release_date: Optional[str] = None
    attachment: Optional[bool] = None
    reasoning: Optional[bool] = None
    temperature: Optional[bool] = None
    tool_call: Optional[bool] = None
    cost: Optional[dict[str, float]] = None
    limit: Optional[ModelLimit] = None
    modalities: Optional[ModelModalities] = None
    status: Optional[LifecycleStatus] = None
    options: dict[str, Any] = Field(default_factory=dict)
    headers: Optional[dict[str, str]] = None
    package: Optional[str] = None

    model_config = {"extra": "forbid"}


class ProviderOptions(BaseModel):
    """Connection options for a provider. Extra keys pass through untouched."""

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    enterprise_url: Optional[str] = Field(
        None, description="GitHub Enterprise URL for Copilot authentication"
    )
    timeout: Union[PositiveInt, Literal[False], None] = Field(
        None,
        description="Request timeout in milliseconds, or false to disable",
    )

    model_config = {"extra": "allow"}

    def as_options(self) -> dict[str, Any]:
        """Only the keys the user actually set."""
        return self.model_dump(exclude_none=True)


class ProviderConfig(BaseModel):
    """User-level provider definition or override."""

    name: Optional[str] = None
    package: Optional[str] = None
    env: Optional[list[str]] = None
    api: Optional[str] = None
    models: dict[str, ModelConfig] = Field(default_factory=dict)
    options: ProviderOptions = Field(default_factory=ProviderOptions)

    model_config = {"extra": "forbid"}


class ResolverConfig(BaseModel):
    """Everything the resolver reads from configuration.

    No more magic strings!
    """

    provider: dict[str, ProviderConfig] = Field(default_factory=dict)
    disabled_providers: list[str] = Field(
        default_factory=list,
        description="Providers never activated automatically",
    )
    model: Optional[str] = Field(
        None, description="Default model in provider/model form"
    )
    small_model: Optional[str] = Field(
        None, description="Lightweight model in provider/model form"
    )
    experimental_models: bool = Field(
        default=False, description="Keep alpha and experimental models"
    )

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def disabled(self) -> set[str]:
        return set(self.disabled_providers)

    @classmethod
    async def load_async(cls, config_path: Path) -> ResolverConfig:
        """Async load from file."""
        if not config_path.exists():
            return cls()

        loop = asyncio.get_event_loop()
        data = await loop.run_in_executor(None, config_path.read_text)
        return cls.model_validate(json.loads(data))

    def with_env_overrides(
        self, environ: Mapping[str, str] | None = None
    ) -> ResolverConfig:
        """Apply environment overrides (environment wins over the file)."""
        updates: dict[str, Any] = {}

        model = get_env(EnvVar.MODEL, environ=environ)
        if model:
            updates["model"] = model

        small_model = get_env(EnvVar.SMALL_MODEL, environ=environ)
        if small_model:
            updates["small_model"] = small_model

        disabled = get_env_list(EnvVar.DISABLED_PROVIDERS, environ=environ)
        if disabled:
            merged = list(self.disabled_providers)
            merged.extend(p for p in disabled if p not in merged)
            updates["disabled_providers"] = merged

        if get_env_bool(EnvVar.ENABLE_EXPERIMENTAL_MODELS, environ=environ):
            updates["experimental_models"] = True

        if not updates:
            return self
        return self.model_copy(update=updates)


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Config file location: env override or the per-user default."""
    configured = get_env(EnvVar.CONFIG, environ=environ)
    if configured:
        return Path(configured).expanduser()
    return Path(DEFAULT_CONFIG_DIR).expanduser() / DEFAULT_CONFIG_FILENAME


@runtime_checkable
class ConfigSource(Protocol):
    """Anything that can produce the merged resolver configuration."""

    async def get(self) -> ResolverConfig:
        ...


class FileConfigSource:
    """Configuration read from a JSON file, then overridden by env vars."""

    def __init__(
        self,
        path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._environ = environ
        self.path = path or default_config_path(environ)

    async def get(self) -> ResolverConfig:
        config = await ResolverConfig.load_async(self.path)
        logger.debug(f"Loaded resolver config from {self.path}")
        return config.with_env_overrides(self._environ)
