"""
Application configuration.

Loads settings from environment variables with sensible defaults.
The auth core never reads settings directly: `AuthConfig.from_settings()`
is called once at startup and the frozen result is injected into the
token issuer and verifier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from quire.errors import SigningError


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = False

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 3000
    client_origin: str = "http://localhost:3000"

    # ==========================================================================
    # Authentication
    # ==========================================================================

    # No default: an empty secret is a fatal startup error
    jwt_secret: str = ""
    jwt_expiry: str = "7d"
    jwt_algorithm: str = "HS256"
    bcrypt_rounds: int = 10

    # ==========================================================================
    # Storage
    # ==========================================================================

    data_dir: str = "./data"
    blob_backend: str = "local"  # local or s3

    aws_region: str = "us-east-2"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_s3_bucket: str = "quire-manuscripts"

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.client_origin.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_s3(self) -> bool:
        """Whether manuscripts go to S3 instead of the local filesystem."""
        return self.blob_backend == "s3"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# =============================================================================
# Durations
# =============================================================================


_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")

_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: str | int) -> timedelta:
    """
    Parse a token lifetime such as "7d", "12h", "30m" or "3600".

    Bare numbers are seconds.
    """
    if isinstance(value, int):
        return timedelta(seconds=value)

    match = _DURATION_RE.match(value.lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


# =============================================================================
# Auth Configuration
# =============================================================================


@dataclass(frozen=True)
class AuthConfig:
    """Immutable signing configuration shared by the token issuer and verifier."""

    secret_key: str
    algorithm: str = "HS256"
    token_lifetime: timedelta = timedelta(days=7)

    def __post_init__(self):
        if not self.secret_key:
            raise SigningError("JWT secret is not set")
        if not self.algorithm.startswith("HS"):
            raise SigningError(f"Unsupported signing algorithm: {self.algorithm}")
        if self.token_lifetime <= timedelta(0):
            raise SigningError("Token lifetime must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> AuthConfig:
        return cls(
            secret_key=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            token_lifetime=parse_duration(settings.jwt_expiry),
        )
