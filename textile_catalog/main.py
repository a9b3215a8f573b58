"""Textile catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from textile_catalog.api.health import router as health_router
from textile_catalog.api.middleware import setup_middleware
from textile_catalog.api.products import router as products_router
from textile_catalog.api.share import router as share_router
from textile_catalog.api.taxonomy import router as taxonomy_router
from textile_catalog.api.variants import router as variants_router
from textile_catalog.domain.exceptions import (
    DomainError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    TransportError,
    ValidationError,
)
from textile_catalog.infrastructure.backends import close_backends, get_document_store
from textile_catalog.infrastructure.config import settings
from textile_catalog.infrastructure.database import SqlDocumentStore
from textile_catalog.infrastructure.logging_config import configure_logging

configure_logging(settings)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting textile catalog API",
        version=settings.api_version,
        debug=settings.debug,
        document_store=settings.document_store,
        blob_store=settings.blob_store,
        identity_provider=settings.identity_provider,
    )

    documents = get_document_store()
    if isinstance(documents, SqlDocumentStore):
        await documents.create_schema()

    yield

    logger.info("Shutting down textile catalog API")
    await close_backends()


app = FastAPI(
    title="Textile Catalog API",
    description="Product catalog for textile variants with image storage and sharing",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, authentication, error handling)
setup_middleware(app)

app.include_router(health_router, tags=["Health"])
app.include_router(taxonomy_router)
app.include_router(products_router)
app.include_router(variants_router)
app.include_router(share_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def _domain_status(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, PermissionDeniedError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, TransportError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_400_BAD_REQUEST


def _error_code(exc: DomainError) -> str:
    if isinstance(exc, ValidationError):
        return "VALIDATION_ERROR"
    if isinstance(exc, NotFoundError):
        return f"{exc.entity_type.upper()}_NOT_FOUND"
    if isinstance(exc, PermissionDeniedError):
        return "FORBIDDEN"
    if isinstance(exc, TransportError):
        return "TRANSPORT_ERROR"
    if isinstance(exc, InvalidStateTransitionError):
        return "INVALID_SELECTION"
    return "DOMAIN_ERROR"


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Map domain errors to the standard error format."""
    request_id = getattr(request.state, "request_id", None)
    status_code = _domain_status(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Domain error",
        path=request.url.path,
        error_code=_error_code(exc),
        error=exc.message,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": _error_code(exc),
            "message": exc.message,
            "details": exc.details,
            "request_id": request_id,
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", {})
    else:
        error_code = "ERROR"
        message = str(detail)
        details = {}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": {},
            "request_id": request_id,
        },
    )


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "textile_catalog.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
