# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /api/auth/login    - Exchange email + password for a token
#   POST /api/auth/refresh  - Exchange a still-valid token for a fresh one
#
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict, Field

from quire.api.deps import get_credential_verifier, get_session_refresher, get_token_issuer
from quire.auth.credentials import CredentialVerifier, LoginError
from quire.auth.policies import optional_bearer
from quire.auth.tokens import SessionRefresher, TokenError, TokenIssuer
from quire.errors import AuthenticationError, BadRequestError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# =============================================================================
# Request/Response Models
# =============================================================================


class LoginRequest(BaseModel):
    # Both optional so a missing field is a 400 from us, not a 422 from FastAPI
    email: str | None = None
    password: str | None = None


class AuthTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth_token: str = Field(alias="authToken")


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/login", response_model=AuthTokenResponse)
async def login(
    data: LoginRequest | None = Body(default=None),
    credentials: CredentialVerifier = Depends(get_credential_verifier),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Authenticate and get a token.

    The failure message is the same whether or not the email exists.
    """
    if data is None or not data.email or not data.password:
        raise BadRequestError("Missing email or password")

    result = await credentials.authenticate(data.email, data.password)
    if isinstance(result, LoginError):
        raise AuthenticationError("Incorrect email or password")

    signed = issuer.issue(result)
    logger.info(f"User {result.id} logged in")
    return AuthTokenResponse(auth_token=signed.token)


@router.post("/refresh", response_model=AuthTokenResponse)
async def refresh(
    bearer: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    refresher: SessionRefresher = Depends(get_session_refresher),
):
    """Re-issue a token for the identity in a still-valid bearer token."""
    if not bearer:
        raise AuthenticationError("Unauthorized")

    result = refresher.refresh(bearer.credentials)
    if isinstance(result, TokenError):
        raise AuthenticationError("Unauthorized")

    return AuthTokenResponse(auth_token=result.token)
