"""API middleware for the catalog API.

Provides:
- Request ID correlation
- Bearer token authentication and role resolution
"""

import time
from typing import Callable
from uuid import uuid4

import httpx
import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from textile_catalog.application.auth_service import get_auth_service
from textile_catalog.domain.exceptions import TransportError
from textile_catalog.infrastructure.backends import get_identity_provider

logger = structlog.get_logger()


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Authentication Middleware
# ============================================================================


# Paths that don't require authentication
PUBLIC_PATHS = {
    "/health",
    "/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
}


def _unauthorized(error_code: str, message: str, request_id: str | None) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={
            "error_code": error_code,
            "message": message,
            "details": {},
            "request_id": request_id,
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware for ID token authentication.

    Validates ``Authorization: Bearer <id_token>`` with the identity
    provider, resolves the user's role and stores the result on
    ``request.state.user``.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Authenticate protected endpoints.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response, or a 401/502 error.
        """
        path = request.url.path.rstrip("/")
        if path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc"):
            return await call_next(request)

        request_id = getattr(request.state, "request_id", None)
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            logger.warning("Missing authorization header", path=path, method=request.method)
            return _unauthorized("UNAUTHORIZED", "Missing Authorization header", request_id)

        parts = auth_header.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
            logger.warning("Invalid authorization format", path=path, method=request.method)
            return _unauthorized(
                "UNAUTHORIZED",
                "Invalid Authorization header format. Use 'Bearer <token>'",
                request_id,
            )

        try:
            identity = await get_identity_provider().verify_token(parts[1].strip())
            if identity is None:
                logger.warning("Invalid token", path=path, method=request.method)
                return _unauthorized("INVALID_TOKEN", "You must be logged in", request_id)
            user = await get_auth_service().resolve_user(identity)
        except (TransportError, httpx.HTTPError) as e:
            logger.error("Authentication backend failed", path=path, error=str(e))
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={
                    "error_code": "TRANSPORT_ERROR",
                    "message": str(e),
                    "details": {},
                    "request_id": request_id,
                },
            )

        request.state.user = user
        structlog.contextvars.bind_contextvars(uid=user.uid)
        try:
            return await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("uid")


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(AuthMiddleware)
    app.add_middleware(RequestIdMiddleware)
