# =============================================================================
# Session Tokens
# =============================================================================
#
# Stateless signed tokens:
#   - TokenIssuer: identity -> signed JWT
#   - TokenVerifier: raw JWT -> identity, or a typed TokenError
#   - SessionRefresher: still-valid JWT -> fresh JWT for the same claim
#
# Payload shape:
#   {"user": {id, email, firstName, lastName, admin, editor},
#    "sub": <email>, "iat": <issued>, "exp": <expires>}
#
# Verification order is structure, then signature/algorithm, then expiry,
# then claim shape. Expiry is checked against an explicit `now` so a
# verification is a pure function of (token, now, secret).
#
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import jwt
import pydantic

from quire.config import AuthConfig
from quire.core.models import Identity
from quire.core.utils import utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class SignedToken:
    """A signed session token and the instants embedded in it."""

    token: str
    issued_at: datetime
    expires_at: datetime

    def __str__(self) -> str:
        return self.token


class TokenErrorReason(str, Enum):
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad-signature"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TokenError:
    """
    Why a token was rejected.

    Every reason is a 401 to the client; the distinction is for logs
    and tests only.
    """

    reason: TokenErrorReason
    detail: str = ""


# =============================================================================
# Issuing
# =============================================================================


class TokenIssuer:
    """Signs identity claims with the server secret."""

    def __init__(self, config: AuthConfig):
        self.config = config

    def issue(self, identity: Identity, now: datetime | None = None) -> SignedToken:
        """
        Create a signed token for an identity.

        `now` defaults to the current time; it is truncated to whole
        seconds because that is the resolution JWT timestamps carry.
        """
        issued_at = (now or utc_now()).replace(microsecond=0)
        expires_at = issued_at + self.config.token_lifetime

        payload = {
            "user": identity.to_claim(),
            "sub": identity.email,
            "iat": issued_at,
            "exp": expires_at,
        }

        token = jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)
        return SignedToken(token=token, issued_at=issued_at, expires_at=expires_at)


# =============================================================================
# Verification
# =============================================================================


class TokenVerifier:
    """Validates bearer tokens against the server secret and algorithm."""

    def __init__(self, config: AuthConfig):
        self.config = config

    def decode(self, raw_token: str) -> dict[str, Any]:
        """
        Check structure and signature and return the raw payload.

        Raises jwt.InvalidTokenError subclasses. Expiry is not checked here.
        """
        # A header without "alg" is a structural defect, not a signature mismatch
        if not jwt.get_unverified_header(raw_token).get("alg"):
            raise jwt.DecodeError("Algorithm not specified")

        return jwt.decode(
            raw_token,
            self.config.secret_key,
            algorithms=[self.config.algorithm],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "require": ["exp"],
            },
        )

    def verify(self, raw_token: str, now: datetime | None = None) -> Identity | TokenError:
        """
        Verify a token and extract its identity.

        Returns:
            Identity on success, TokenError otherwise. Never raises for a
            bad token.
        """
        try:
            payload = self.decode(raw_token)
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            return self._reject(TokenErrorReason.BAD_SIGNATURE, str(e))
        except jwt.InvalidTokenError as e:
            return self._reject(TokenErrorReason.MALFORMED, str(e))

        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return self._reject(TokenErrorReason.MALFORMED, "exp is not a timestamp")

        current = (now or utc_now()).timestamp()
        if current > exp:
            expired_at = datetime.fromtimestamp(exp, tz=timezone.utc)
            return self._reject(TokenErrorReason.EXPIRED, f"expired at {expired_at.isoformat()}")

        claim = payload.get("user")
        if not isinstance(claim, dict) or not claim.get("id") or not claim.get("email"):
            return self._reject(TokenErrorReason.MALFORMED, "user claim missing id or email")

        try:
            return Identity.model_validate(claim)
        except pydantic.ValidationError as e:
            return self._reject(TokenErrorReason.MALFORMED, f"invalid user claim: {e.error_count()} errors")

    @staticmethod
    def _reject(reason: TokenErrorReason, detail: str) -> TokenError:
        logger.debug(f"Token rejected ({reason.value}): {detail}")
        return TokenError(reason=reason, detail=detail)


# =============================================================================
# Refresh
# =============================================================================


class SessionRefresher:
    """
    Re-issue a token from a still-valid one.

    The claim is carried over as-is. The user record is not re-read, so
    role changes only show up after the next login.
    """

    def __init__(self, verifier: TokenVerifier, issuer: TokenIssuer):
        self.verifier = verifier
        self.issuer = issuer

    def refresh(self, raw_token: str, now: datetime | None = None) -> SignedToken | TokenError:
        result = self.verifier.verify(raw_token, now=now)
        if isinstance(result, TokenError):
            return result
        return self.issuer.issue(result, now=now)
