"""
Request-scoped accessors for the services built at startup.

Everything lives on `app.state`, populated by `create_app()`. Routes
depend on these functions instead of importing globals, which is also
how tests swap in their own storage.

`get_page` is the one request-parameter dependency: list endpoints page
through the document store with `?limit=&offset=`.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Query, Request

from quire.auth.credentials import CredentialVerifier
from quire.auth.passwords import PasswordHasher
from quire.auth.tokens import SessionRefresher, TokenIssuer, TokenVerifier
from quire.storage.base import StorageProvider
from quire.users.store import UserStore


def get_storage(request: Request) -> StorageProvider:
    return request.app.state.storage


def get_user_store(request: Request) -> UserStore:
    return request.app.state.users


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_credential_verifier(request: Request) -> CredentialVerifier:
    return request.app.state.credentials


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_session_refresher(request: Request) -> SessionRefresher:
    return request.app.state.refresher


# =============================================================================
# Pagination
# =============================================================================

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class Page:
    limit: int
    offset: int


def get_page(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> Page:
    return Page(limit=limit, offset=offset)
