"""
FastAPI application for the submission platform.

`create_app()` builds everything once: settings, the immutable auth
configuration, storage and the auth services. An empty JWT secret stops
the app from being created at all.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quire.auth.credentials import CredentialVerifier
from quire.auth.passwords import PasswordHasher
from quire.auth.routes import router as auth_router
from quire.auth.tokens import SessionRefresher, TokenIssuer, TokenVerifier
from quire.config import AuthConfig, Settings, get_settings
from quire.errors import AppError, InternalError
from quire.integrations.sentry import capture_exception, init_sentry
from quire.publications.routes import router as publications_router
from quire.storage import StorageProvider, create_local_storage
from quire.submissions.routes import router as submissions_router
from quire.users.routes import router as users_router
from quire.users.store import UserStore

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    init_sentry(settings)
    logger.info(f"Quire API starting in {settings.environment} mode")

    yield

    logger.info("Quire API shutting down")


# =============================================================================
# Storage
# =============================================================================


def build_storage(settings: Settings) -> StorageProvider:
    """Pick the blob backend from settings; documents stay in memory."""
    storage = create_local_storage(settings.data_dir)
    if settings.use_s3:
        from quire.storage.s3 import S3BlobStore

        storage = StorageProvider(
            documents=storage.documents,
            blobs=S3BlobStore.from_settings(settings),
        )
    return storage


# =============================================================================
# Error handlers
# =============================================================================


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = first.get("loc", ())
    return JSONResponse(
        status_code=422,
        content={
            "code": 422,
            "reason": "ValidationError",
            "message": first.get("msg", "Invalid request"),
            "location": str(location[-1]) if location else None,
        },
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"message": "endpoint not found"})
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.status_code, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    capture_exception(exc, path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content=InternalError("unexpected").to_dict())


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
) -> FastAPI:
    """
    Build the API.

    Raises:
        SigningError: the JWT secret is missing or the signing setup is invalid
    """
    settings = settings or get_settings()
    auth_config = AuthConfig.from_settings(settings)

    app = FastAPI(
        title="Quire API",
        description="Manuscript submissions, review and publication management",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Services, built once and shared by every request
    app.state.settings = settings
    app.state.auth_config = auth_config
    app.state.storage = storage or build_storage(settings)
    app.state.users = UserStore(app.state.storage.documents)
    app.state.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.credentials = CredentialVerifier(app.state.users, app.state.hasher)
    app.state.token_issuer = TokenIssuer(auth_config)
    app.state.token_verifier = TokenVerifier(auth_config)
    app.state.refresher = SessionRefresher(app.state.token_verifier, app.state.token_issuer)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(publications_router)
    app.include_router(submissions_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "quire-api"}

    return app
