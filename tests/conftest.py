"""
Shared fixtures.

Every test gets its own app built from explicit settings (never the
environment), an in-memory document store and a temporary blob
directory. Tokens are minted with the app's own issuer.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from quire.api.app import create_app
from quire.auth.tokens import TokenIssuer, TokenVerifier
from quire.config import AuthConfig, Settings
from quire.core.models import Identity
from quire.storage import StorageProvider, create_local_storage

SECRET = "test-secret-with-enough-entropy-for-hs256-0123456789"


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret=SECRET,
        jwt_expiry="7d",
        bcrypt_rounds=4,  # keep the suite fast; production uses 10
        data_dir=str(tmp_path),
        sentry_dsn="",
    )


@pytest.fixture
def auth_config(settings) -> AuthConfig:
    return AuthConfig.from_settings(settings)


@pytest.fixture
def issuer(auth_config) -> TokenIssuer:
    return TokenIssuer(auth_config)


@pytest.fixture
def verifier(auth_config) -> TokenVerifier:
    return TokenVerifier(auth_config)


# =============================================================================
# Identities
# =============================================================================


@pytest.fixture
def author() -> Identity:
    return Identity(
        id="1234567880",
        email="testUser@example.com",
        first_name="Usey",
        last_name="Userman",
    )


@pytest.fixture
def stranger() -> Identity:
    return Identity(
        id="notlegit",
        email="notauthor@example.com",
        first_name="Nota",
        last_name="Author",
    )


@pytest.fixture
def editor() -> Identity:
    return Identity(
        id="editor-1",
        email="editorTest@example.com",
        first_name="Eddie",
        last_name="Tor",
        editor=True,
    )


@pytest.fixture
def admin() -> Identity:
    return Identity(
        id="admin-1",
        email="adminTest@example.com",
        first_name="Firstathy",
        last_name="Lastnamerham",
        admin=True,
    )


# =============================================================================
# App
# =============================================================================


@pytest.fixture
def storage(tmp_path) -> StorageProvider:
    return create_local_storage(str(tmp_path))


@pytest.fixture
def app(settings, storage):
    return create_app(settings, storage)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def bearer(issuer) -> Callable[[Identity], dict[str, str]]:
    """Authorization header for an identity."""
    def _bearer(identity: Identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {issuer.issue(identity).token}"}
    return _bearer


@pytest.fixture
def run() -> Callable[[Any], Any]:
    """Run a store coroutine from a synchronous test."""
    return asyncio.run
