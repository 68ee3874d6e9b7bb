# src/provider_resolver/model_management/packages.py
"""
Client package acquisition.

Client packages are imported on demand. A package that is not importable
is installed into the running interpreter with pip (unless auto-install is
disabled) and imported again. ``file://`` references point at a module
file or package directory on disk and are never installed.
"""

from __future__ import annotations

import asyncio
import hashlib
import importlib
import importlib.util
import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from types import ModuleType

from provider_resolver.config.defaults import (
    LOCAL_PACKAGE_PREFIX,
    PACKAGE_DISTRIBUTIONS,
    PIP_INSTALL_TIMEOUT,
)
from provider_resolver.config.env_vars import EnvVar, get_env_bool
from provider_resolver.model_management.errors import PackageInstallError
from provider_resolver.utils.single_flight import SingleFlight

logger = logging.getLogger(__name__)


def is_local_package(package: str) -> bool:
    return package.startswith(LOCAL_PACKAGE_PREFIX)


def distribution_name(package: str) -> str:
    """pip distribution name for an import name."""
    return PACKAGE_DISTRIBUTIONS.get(package, package.replace("_", "-"))


class PackageInstaller:
    """Imports client packages, installing them first when missing."""

    def __init__(
        self,
        auto_install: bool | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        if auto_install is None:
            auto_install = not get_env_bool(EnvVar.DISABLE_AUTOINSTALL, environ=environ)
        self.auto_install = auto_install
        self._installs: SingleFlight[None] = SingleFlight()

    async def load(self, package: str, module: str | None = None) -> ModuleType:
        """
        Import ``module`` (default: the package itself) from ``package``.

        Raises:
            PackageInstallError: If the package cannot be imported or installed
        """
        if is_local_package(package):
            return self.load_local(package)

        module_name = module or package
        try:
            return importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            # Only a missing top-level package is worth installing
            if e.name is not None and e.name.split(".")[0] != package.split(".")[0]:
                raise PackageInstallError(package, str(e)) from e
            if not self.auto_install:
                raise PackageInstallError(package, "not installed") from e

        await self._installs.do(package, lambda: self._pip_install(package))
        importlib.invalidate_caches()
        try:
            return importlib.import_module(module_name)
        except ImportError as e:
            raise PackageInstallError(package, str(e)) from e

    async def _pip_install(self, package: str) -> None:
        dist = distribution_name(package)
        logger.info(f"Installing client package {dist}")
        proc = await asyncio.create_subprocess_exec(
            sys.executable,
            "-m",
            "pip",
            "install",
            "--quiet",
            dist,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=PIP_INSTALL_TIMEOUT
            )
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise PackageInstallError(package, "pip install timed out") from e

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip().splitlines()
            raise PackageInstallError(package, detail[-1] if detail else "pip failed")

    def load_local(self, package: str) -> ModuleType:
        """Import a ``file://`` module or package; repeated loads reuse it."""
        path = Path(package[len(LOCAL_PACKAGE_PREFIX):]).expanduser()

        search_locations = None
        if path.is_dir():
            search_locations = [str(path)]
            path = path / "__init__.py"
        if not path.is_file():
            raise PackageInstallError(package, f"{path} does not exist")

        digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:12]
        name = f"provider_resolver_local_{digest}"
        if name in sys.modules:
            return sys.modules[name]

        spec = importlib.util.spec_from_file_location(
            name, path, submodule_search_locations=search_locations
        )
        if spec is None or spec.loader is None:
            raise PackageInstallError(package, f"cannot import {path}")

        logger.info(f"Loading local provider package {path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(name, None)
            raise PackageInstallError(package, f"{type(e).__name__}: {e}") from e
        return module
