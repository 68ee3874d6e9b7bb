# src/provider_resolver/catalog/source.py
"""
Model catalog sources.

The catalog is the static table of known providers and models. It is read
through the narrow ``CatalogSource`` protocol; ``ModelsDevCatalog`` is the
default implementation backed by the public models.dev table, and
``StaticCatalog`` serves an in-memory table (embedding, tests).
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import httpx

from provider_resolver.catalog.models import ProviderDescriptor
from provider_resolver.config.defaults import (
    CATALOG_FETCH_TIMEOUT,
    CATALOG_USER_AGENT,
    DEFAULT_CACHE_DIR,
    DEFAULT_CATALOG_CACHE_FILENAME,
    MODELS_DEV_URL,
)
from provider_resolver.config.env_vars import EnvVar, get_env

logger = logging.getLogger(__name__)


@runtime_checkable
class CatalogSource(Protocol):
    """Anything that can produce the provider catalog."""

    async def get(self) -> dict[str, ProviderDescriptor]:
        """Return the catalog keyed by provider id.

        Callers may mutate the returned descriptors; implementations must
        hand out fresh copies on every call.
        """
        ...


def parse_catalog(raw: dict[str, Any]) -> dict[str, ProviderDescriptor]:
    """Parse a models.dev style document into descriptors."""
    catalog: dict[str, ProviderDescriptor] = {}
    for provider_id, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        entry = {"id": provider_id, **entry}
        models = entry.get("models") or {}
        entry["models"] = {
            model_id: {"id": model_id, **model}
            for model_id, model in models.items()
            if isinstance(model, dict)
        }
        catalog[provider_id] = ProviderDescriptor.model_validate(entry)
    return catalog


class StaticCatalog:
    """Catalog served from descriptors held in memory."""

    def __init__(self, providers: dict[str, ProviderDescriptor] | None = None):
        self._providers = dict(providers or {})

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> StaticCatalog:
        return cls(parse_catalog(raw))

    async def get(self) -> dict[str, ProviderDescriptor]:
        return {
            provider_id: descriptor.model_copy(deep=True)
            for provider_id, descriptor in self._providers.items()
        }


class ModelsDevCatalog:
    """
    Catalog backed by models.dev.

    Lookup order on ``get()``:
    1. The cached copy in the cache directory
    2. A local JSON file named by ``MODELS_DEV_API_JSON``
    3. A fresh download (written to the cache for next time)

    A cache hit also starts a background ``refresh()`` so the next read
    sees a current table.
    """

    def __init__(
        self,
        cache_path: Path | None = None,
        url: str = MODELS_DEV_URL,
        timeout: float = CATALOG_FETCH_TIMEOUT,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.environ = environ
        if cache_path is None:
            cache_dir = Path(
                get_env(EnvVar.CACHE_DIR, environ=environ) or DEFAULT_CACHE_DIR
            )
            cache_path = cache_dir.expanduser() / DEFAULT_CATALOG_CACHE_FILENAME
        self.cache_path = cache_path
        self.url = url
        self.timeout = timeout
        self._refresh_task: asyncio.Task[bool] | None = None

    async def get(self) -> dict[str, ProviderDescriptor]:
        raw = await self._read_json(self.cache_path)
        if raw is not None:
            self._schedule_refresh()
        else:
            local = get_env(EnvVar.MODELS_DEV_API_JSON, environ=self.environ)
            if local:
                raw = await self._read_json(Path(local).expanduser())
        if raw is None:
            text = await self._fetch()
            await self._write_cache(text)
            raw = json.loads(text)
        return parse_catalog(raw)

    async def refresh(self) -> bool:
        """
        Re-download the catalog into the cache.

        Returns:
            True if the cache was updated, False if the download failed
        """
        logger.info(f"Refreshing model catalog from {self.url}")
        try:
            text = await self._fetch()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch model catalog: {e}")
            return False
        await self._write_cache(text)
        return True

    def _schedule_refresh(self) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            return
        self._refresh_task = asyncio.ensure_future(self.refresh())
        self._refresh_task.add_done_callback(self._refresh_done)

    @staticmethod
    def _refresh_done(task: asyncio.Task[bool]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Background catalog refresh failed: {error}")

    async def aclose(self) -> None:
        """Cancel a background refresh still in flight."""
        task, self._refresh_task = self._refresh_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _fetch(self) -> str:
        headers = {"User-Agent": CATALOG_USER_AGENT}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.url, headers=headers)
            response.raise_for_status()
            return response.text

    async def _read_json(self, path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        loop = asyncio.get_event_loop()
        try:
            data = await loop.run_in_executor(None, path.read_text)
            return json.loads(data)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable catalog file {path}: {e}")
            return None

    async def _write_cache(self, text: str) -> None:
        def write() -> None:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text(text)

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, write)
        except OSError as e:
            logger.warning(f"Could not write catalog cache {self.cache_path}: {e}")
