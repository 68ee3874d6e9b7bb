"""Common test fixtures and fakes for provider-resolver tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from provider_resolver.auth.credentials import ApiCredential
from provider_resolver.catalog.source import StaticCatalog
from provider_resolver.config.models import ResolverConfig
from provider_resolver.model_management.model_manager import ModelManager
from provider_resolver.model_management.packages import PackageInstaller


FAKE_CLIENT_MODULE = textwrap.dedent(
    '''
    from provider_resolver.model_management.errors import NoSuchModelError

    CALLS = []


    class FakeClient:
        def __init__(self, name, options):
            self.name = name
            self.options = options
            self.closed = False

        def language_model(self, model_id):
            if model_id.startswith("missing"):
                raise NoSuchModelError(model_id)
            return ("language", self.name, model_id)

        def chat(self, model_id):
            return ("chat", self.name, model_id)

        def responses(self, model_id):
            return ("responses", self.name, model_id)

        async def aclose(self):
            self.closed = True


    def create_fake(name, **options):
        CALLS.append((name, options))
        return FakeClient(name, options)
    '''
)

FLAKY_CLIENT_MODULE = textwrap.dedent(
    '''
    ATTEMPTS = []


    class Client:
        def language_model(self, model_id):
            return ("language", model_id)


    def create_flaky(name, **options):
        ATTEMPTS.append(name)
        if len(ATTEMPTS) == 1:
            raise RuntimeError("transient failure")
        return Client()
    '''
)


class FakeConfigSource:
    """Config source returning a fixed ResolverConfig."""

    def __init__(self, config: ResolverConfig | None = None) -> None:
        self.config = config or ResolverConfig()
        self.calls = 0

    async def get(self) -> ResolverConfig:
        self.calls += 1
        return self.config


class FakeCredentials:
    """In-memory credential source."""

    def __init__(self, credentials: dict[str, Any] | None = None) -> None:
        self.credentials = dict(credentials or {})

    async def all(self) -> dict[str, Any]:
        return dict(self.credentials)

    async def get(self, provider_id: str) -> Any:
        return self.credentials.get(provider_id)


class LocalPackage:
    """A client module written to disk and referenced as ``file://``."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.ref = f"file://{path}"

    @property
    def module(self):
        return PackageInstaller(auto_install=False).load_local(self.ref)


def write_package(directory: Path, name: str, source: str) -> LocalPackage:
    path = directory / f"{name}.py"
    path.write_text(source)
    return LocalPackage(path)


@pytest.fixture
def fake_package(tmp_path: Path) -> LocalPackage:
    """Local client package whose factory records every call in CALLS."""
    return write_package(tmp_path, "fake_client", FAKE_CLIENT_MODULE)


@pytest.fixture
def flaky_package(tmp_path: Path) -> LocalPackage:
    """Local client package whose factory fails on the first call only."""
    return write_package(tmp_path, "flaky_client", FLAKY_CLIENT_MODULE)


def catalog_data(package: str) -> dict[str, Any]:
    """A small models.dev shaped catalog served by ``package``."""
    return {
        "alpha": {
            "name": "Alpha AI",
            "npm": package,
            "env": ["ALPHA_API_KEY"],
            "api": "https://alpha.example/v1",
            "models": {
                "alpha-large": {"name": "Alpha Large", "cost": {"input": 3, "output": 15}},
                "alpha-mini": {"cost": {"input": 0.1, "output": 0.4}},
                "alpha-old": {"status": "deprecated"},
                "alpha-next": {"experimental": True},
            },
        },
        "beta": {
            "name": "Beta",
            "npm": package,
            "env": ["BETA_API_KEY", "BETA_TOKEN"],
            "models": {"beta-1": {"cost": {"input": 1, "output": 2}}},
        },
        "opencode": {
            "name": "OpenCode",
            "npm": package,
            "env": ["OPENCODE_API_KEY"],
            "models": {
                "big-pickle": {"cost": {"input": 0, "output": 0}},
                "gpt-5-nano": {"cost": {"input": 0, "output": 0}},
                "claude-sonnet-4-5": {"cost": {"input": 3, "output": 15}},
            },
        },
    }


@pytest.fixture
def catalog(fake_package: LocalPackage) -> StaticCatalog:
    return StaticCatalog.from_dict(catalog_data(fake_package.ref))


@pytest.fixture
def make_manager(catalog: StaticCatalog):
    """Build a ModelManager around fakes; nothing touches disk or network."""

    def factory(
        config: ResolverConfig | None = None,
        credentials: dict[str, Any] | None = None,
        loaders: dict[str, Any] | None = None,
        environ: dict[str, str] | None = None,
        catalog_source: Any = None,
    ) -> ModelManager:
        return ModelManager(
            config_source=FakeConfigSource(config),
            credentials=FakeCredentials(credentials),
            catalog=catalog_source or catalog,
            loaders={} if loaders is None else loaders,
            installer=PackageInstaller(auto_install=False),
            environ=environ or {},
        )

    return factory


def api_credential(key: str) -> ApiCredential:
    return ApiCredential(key=key)
