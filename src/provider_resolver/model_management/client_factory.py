# src/provider_resolver/model_management/client_factory.py
"""
Client acquisition and caching.

This module turns an active provider into a client: it imports (installing
if needed) the client package, wraps the package in its adapter and calls
the factory with the provider's options. Clients are cached by a hash of
(package, entry module, options) so providers with identical settings
share one client.

Any failure is reported as ``InitError``; nothing is cached on failure, so
the next call tries again.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Mapping
from typing import Any

from provider_resolver.catalog.models import ModelDescriptor, ProviderDescriptor
from provider_resolver.config.defaults import (
    ENTRY_POINT_OVERRIDES,
    OPENAI_COMPATIBLE_PACKAGES,
    PACKAGE_ENTRY_MODULES,
)
from provider_resolver.model_management.clients import (
    ProviderClient,
    close_client,
    resolve_factory,
)
from provider_resolver.model_management.errors import InitError
from provider_resolver.model_management.fetch import with_timeout
from provider_resolver.model_management.packages import PackageInstaller
from provider_resolver.utils.single_flight import SingleFlight

logger = logging.getLogger(__name__)


def cache_key(package: str, module: str | None, options: Mapping[str, Any]) -> str:
    """Stable hash of everything that determines a client."""
    payload = json.dumps(
        {"package": package, "module": module, "options": options},
        sort_keys=True,
        default=repr,
    )
    return hashlib.sha256(payload.encode()).hexdigest()


class ClientAcquisition:
    """
    Factory for acquiring and caching provider clients.

    One instance lives inside each provider state; disposing the state
    closes every client it created.
    """

    def __init__(self, installer: PackageInstaller | None = None) -> None:
        self.installer = installer or PackageInstaller()
        self._clients: SingleFlight[ProviderClient] = SingleFlight()

    def client_spec(
        self,
        provider: ProviderDescriptor,
        model: ModelDescriptor,
        options: Mapping[str, Any],
    ) -> tuple[str, str | None, dict[str, Any]]:
        """Package, entry module and effective options for a provider/model."""
        package = model.package or provider.package_ref
        module = PACKAGE_ENTRY_MODULES.get(package)
        if provider.id in ENTRY_POINT_OVERRIDES:
            package, module = ENTRY_POINT_OVERRIDES[provider.id]

        resolved = dict(options)
        if package in OPENAI_COMPATIBLE_PACKAGES and resolved.get("include_usage") is None:
            resolved["include_usage"] = True
        return package, module, resolved

    async def acquire(
        self,
        provider: ProviderDescriptor,
        model: ModelDescriptor,
        options: Mapping[str, Any],
    ) -> ProviderClient:
        """
        Get or create the client for a provider.

        Raises:
            InitError: If the package cannot be loaded or the factory fails
        """
        package, module, resolved = self.client_spec(provider, model, options)
        key = cache_key(package, module, resolved)

        async def create() -> ProviderClient:
            loaded = await self.installer.load(package, module)
            factory = resolve_factory(loaded)

            client_options = dict(resolved)
            timeout = client_options.pop("timeout", None)
            if timeout is not None:
                client_options["fetch"] = with_timeout(timeout, client_options.get("fetch"))

            client = factory.create(provider.id, **client_options)
            logger.debug(f"Created {package} client for {provider.id}")
            return client

        try:
            return await self._clients.do(key, create)
        except Exception as e:
            raise InitError(provider.id, e) from e

    def get_cache_size(self) -> int:
        """Get the number of cached clients."""
        return len(self._clients)

    async def clear_cache(self) -> None:
        """Clear the client cache and close the clients it held."""
        clients = self._clients.values()
        self._clients.clear()
        for client in clients:
            await close_client(client)
        logger.debug(f"Cleared client cache ({len(clients)} clients)")
