"""Main FastAPI application for the labelvault distribution backend."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from labelvault import __version__
from labelvault.api.routes import (
    artists,
    auth,
    health,
    labels,
    notices,
    releases,
    revenue,
    search,
    users,
)
from labelvault.core.database import get_database
from labelvault.core.exceptions import ServiceError
from labelvault.core.settings import get_settings
from labelvault.middleware.auth import AuthenticationMiddleware
from labelvault.middleware.logging import LoggingMiddleware, configure_logging
from labelvault.middleware.routing import CORS_HEADERS, ApiPrefixMiddleware

# Initialize logging
configure_logging()

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    await get_database().connect()
    yield
    # Shutdown
    await get_database().disconnect()


app = FastAPI(
    title="labelvault",
    description="Label hierarchy, release workflow and distribution backend",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
)

# Last added runs first: prefix/OPTIONS -> logging -> auth -> CORS -> routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(AuthenticationMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(ApiPrefixMiddleware, prefix=settings.api_prefix, cors_headers=CORS_HEADERS)


# Exception handlers
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Map typed service errors to their status and the error body."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Request body and query validation failures are plain 400s."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "error": f"{location}: {message}" if location else message,
            "code": "VALIDATION_ERROR",
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail if isinstance(exc.detail, str) else str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# Routes
app.include_router(health.router, prefix="", tags=["system"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "labelvault",
        "version": __version__,
        "status": "running",
        "api": {
            "prefix": settings.api_prefix,
            "docs": "/docs" if not settings.is_production else None,
        },
    }


app.include_router(auth.router)
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(labels.router, prefix="/labels", tags=["labels"])
app.include_router(artists.router, prefix="/artists", tags=["artists"])
app.include_router(releases.router, prefix="/releases", tags=["releases"])
app.include_router(notices.router, prefix="/notices", tags=["notices"])
app.include_router(revenue.router, prefix="/revenue", tags=["revenue"])
app.include_router(search.router, prefix="/search", tags=["search"])


if __name__ == "__main__":
    uvicorn.run(
        "labelvault.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
