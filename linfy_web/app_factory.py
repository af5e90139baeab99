"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from linfy.errors import APIError
from .api import api_router
from .middleware.headers import SecurityHeadersMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.ratelimit import RateLimitMiddleware


def _error_body(message: str, detail=None) -> dict:
    body = {"success": False, "error": message}
    if detail is not None:
        body["detail"] = detail
    return body


def _register_exception_handlers(app: FastAPI) -> None:
    """Convert every error into the JSON error body."""
    logger = logging.getLogger("linfy.web")

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
            config = request.app.state.config
            message = "Internal server error" if config.is_production else exc.message
            return JSONResponse(status_code=exc.status_code, content=_error_body(message))
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(status_code=400, content=_error_body(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        config = request.app.state.config
        detail = None if config.is_production else str(exc)
        return JSONResponse(status_code=500, content=_error_body("Internal server error", detail))


def create_app(
    config,
    db_instance=None,
    cache_instance=None,
    link_service=None,
    account_service=None,
    authenticator=None,
    rate_limiter=None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Configuration instance
        db_instance: Database instance
        cache_instance: Redis instance (optional)
        link_service: Link service instance
        account_service: Account service instance
        authenticator: Request authenticator
        rate_limiter: Rate limiter (None disables rate limiting)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Linfy",
        description="URL shortener with QR codes, click counts and API keys",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Store instances in app state for access in routes
    app.state.config = config
    app.state.db = db_instance
    app.state.cache = cache_instance
    app.state.link_service = link_service
    app.state.account_service = account_service
    app.state.authenticator = authenticator
    app.state.rate_limiter = rate_limiter

    _register_exception_handlers(app)

    # Last added runs first: logging, CORS, security headers, rate limit
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(api_router, prefix=config.route_prefix)

    return app
