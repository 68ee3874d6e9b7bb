# tests/auth/test_credentials.py
"""Tests for the file-backed credential store."""

from __future__ import annotations

import json
import os
import stat
import sys

import pytest

from provider_resolver.auth.credentials import (
    ApiCredential,
    CredentialSource,
    CredentialStore,
    OAuthCredential,
    WellKnownCredential,
    default_auth_path,
)
from provider_resolver.config.enums import CredentialType


class TestCredentialModels:
    """Tests for the credential union."""

    def test_types(self):
        assert ApiCredential(key="k").type == CredentialType.API
        assert OAuthCredential(refresh="r", access="a", expires=1).type == CredentialType.OAUTH
        assert WellKnownCredential(key="k", token="t").type == CredentialType.WELL_KNOWN


class TestDefaultAuthPath:
    def test_data_dir_override(self, tmp_path):
        environ = {"PROVIDER_RESOLVER_DATA_DIR": str(tmp_path)}
        assert default_auth_path(environ) == tmp_path / "auth.json"


class TestCredentialStore:
    """Tests for CredentialStore."""

    def test_satisfies_protocol(self, tmp_path):
        assert isinstance(CredentialStore(tmp_path / "auth.json"), CredentialSource)

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        store = CredentialStore(tmp_path / "auth.json")
        assert await store.all() == {}
        assert await store.get("openai") is None

    @pytest.mark.asyncio
    async def test_set_get_all_kinds(self, tmp_path):
        store = CredentialStore(tmp_path / "data" / "auth.json")

        await store.set("openai", ApiCredential(key="sk-test"))
        await store.set(
            "github-copilot",
            OAuthCredential(refresh="r", access="a", expires=123, enterprise_url="ghe.example"),
        )
        await store.set("custom", WellKnownCredential(key="KEY", token="tok"))

        all_credentials = await store.all()
        assert isinstance(all_credentials["openai"], ApiCredential)
        assert all_credentials["github-copilot"].enterprise_url == "ghe.example"
        assert (await store.get("custom")).token == "tok"

    @pytest.mark.asyncio
    async def test_file_format(self, tmp_path):
        path = tmp_path / "auth.json"
        store = CredentialStore(path)

        await store.set("openai", ApiCredential(key="sk-test"))

        assert json.loads(path.read_text()) == {"openai": {"type": "api", "key": "sk-test"}}

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    @pytest.mark.asyncio
    async def test_file_is_owner_only(self, tmp_path):
        path = tmp_path / "auth.json"
        await CredentialStore(path).set("openai", ApiCredential(key="sk-test"))

        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_remove(self, tmp_path):
        store = CredentialStore(tmp_path / "auth.json")
        await store.set("openai", ApiCredential(key="sk-test"))

        await store.remove("openai")

        assert await store.all() == {}

    @pytest.mark.asyncio
    async def test_invalid_file_yields_empty(self, tmp_path):
        path = tmp_path / "auth.json"
        path.write_text(json.dumps({"openai": {"type": "mystery"}}))

        assert await CredentialStore(path).all() == {}
