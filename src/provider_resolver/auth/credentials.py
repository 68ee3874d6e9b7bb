# src/provider_resolver/auth/credentials.py
"""
Stored provider credentials.

Credentials live in a single JSON file (``auth.json`` in the data dir),
keyed by provider id. Three kinds are supported: plain API keys, OAuth
token pairs and "well-known" key/token pairs. The file is rewritten with
owner-only permissions on every change.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Literal, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from provider_resolver.config.defaults import DEFAULT_AUTH_FILENAME, DEFAULT_CONFIG_DIR
from provider_resolver.config.env_vars import EnvVar, get_env

logger = logging.getLogger(__name__)


class ApiCredential(BaseModel):
    """A plain API key."""

    type: Literal["api"] = "api"
    key: str

    model_config = {"frozen": True}


class OAuthCredential(BaseModel):
    """OAuth refresh/access token pair."""

    type: Literal["oauth"] = "oauth"
    refresh: str
    access: str
    expires: int = Field(..., description="Access token expiry (unix ms)")
    enterprise_url: Optional[str] = None

    model_config = {"frozen": True}


class WellKnownCredential(BaseModel):
    """Key/token pair obtained through a provider's well-known auth flow."""

    type: Literal["wellknown"] = "wellknown"
    key: str
    token: str

    model_config = {"frozen": True}


Credential = Annotated[
    Union[ApiCredential, OAuthCredential, WellKnownCredential],
    Field(discriminator="type"),
]

_credential_map = TypeAdapter(dict[str, Credential])


@runtime_checkable
class CredentialSource(Protocol):
    """Read access to stored credentials."""

    async def all(self) -> dict[str, Credential]:
        ...

    async def get(self, provider_id: str) -> Credential | None:
        ...


def default_auth_path(environ: Mapping[str, str] | None = None) -> Path:
    data_dir = get_env(EnvVar.DATA_DIR, environ=environ) or DEFAULT_CONFIG_DIR
    return Path(data_dir).expanduser() / DEFAULT_AUTH_FILENAME


class CredentialStore:
    """File-backed credential store."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_auth_path()

    async def all(self) -> dict[str, Credential]:
        """Return every stored credential; an unreadable file yields ``{}``."""
        if not self.path.exists():
            return {}
        loop = asyncio.get_event_loop()
        try:
            data = await loop.run_in_executor(None, self.path.read_text)
            return _credential_map.validate_python(json.loads(data))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable credential store {self.path}: {e}")
            return {}

    async def get(self, provider_id: str) -> Credential | None:
        return (await self.all()).get(provider_id)

    async def set(self, provider_id: str, credential: Credential) -> None:
        """Store (or replace) the credential for a provider."""
        data = await self.all()
        data[provider_id] = credential
        await self._write(data)
        logger.debug(f"Stored {credential.type} credential for {provider_id}")

    async def remove(self, provider_id: str) -> None:
        data = await self.all()
        if data.pop(provider_id, None) is not None:
            logger.debug(f"Removed credential for {provider_id}")
        await self._write(data)

    async def _write(self, data: dict[str, Credential]) -> None:
        payload = _credential_map.dump_python(data, mode="json", exclude_none=True)
        text = json.dumps(payload, indent=2)

        def write() -> None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text)
            os.chmod(self.path, 0o600)

        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, write)
