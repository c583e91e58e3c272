"""FastAPI application entry point for Rollcall."""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from rollcall import __version__
from rollcall.config import settings
from rollcall.database import close_db, init_db

logger = logging.getLogger(__name__)

# Rate limiter configuration
limiter = Limiter(key_func=get_remote_address)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"

        # JSON API only; nothing is rendered by browsers
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        if settings.enforce_https:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


def _is_production() -> bool:
    """Check if we're running in production mode."""
    return not settings.debug and not os.getenv("PYTEST_CURRENT_TEST")


def _validate_security_configuration() -> None:
    """Validate security configuration at startup.

    Raises:
        RuntimeError: If critical security issues are detected in production.
    """
    issues = []

    secret_key = settings.secret_key
    if not secret_key or len(secret_key) < 32:
        issues.append(
            "SECRET_KEY is missing or too short (minimum 32 characters). "
            "Set ROLLCALL_SECRET_KEY environment variable."
        )

    if _is_production() and not settings.enforce_https:
        logger.warning(
            "SECURITY WARNING: HTTPS enforcement is disabled. "
            "Consider enabling enforce_https=true for production."
        )

    if issues and _is_production():
        for issue in issues:
            logger.error("SECURITY ERROR: %s", issue)
        raise RuntimeError(
            "Application startup blocked due to security configuration issues. "
            "See logs for details."
        )
    for issue in issues:
        logger.warning("SECURITY WARNING (development mode): %s", issue)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    _validate_security_configuration()

    # Uploads are kept here until their import is committed
    settings.upload_dir.mkdir(parents=True, exist_ok=True)

    await init_db()
    logger.info("%s %s started", settings.app_name, __version__)

    yield

    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Member list import and reconciliation service",
    version=__version__,
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Only allow origins from the whitelist; empty list means same-origin only
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
        max_age=600,
    )

app.add_middleware(SecurityHeadersMiddleware)


@app.get("/health", tags=["Health"])
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(
        content={
            "status": "healthy",
            "version": __version__,
            "app_name": settings.app_name,
        }
    )


from rollcall.routers import import_router

app.include_router(import_router.router, prefix="/api/imports", tags=["Imports"])
