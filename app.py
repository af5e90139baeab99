#!/usr/bin/env python3
"""
Main entry point for the Linfy URL shortener service.

Concurrency: the server handles many connections per worker via async I/O
(FastAPI + asyncpg connection pool + redis.asyncio). Set WORKERS > 1 for
multi-process scaling; each worker has its own DB pool and, without Redis,
its own rate-limit counters.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL, or memory:// for the in-process store
    DATABASE_CREATE_TABLES - Set to 'true' to create tables on startup
    REDIS_URL - Redis connection URL for rate-limit counters (optional)
    BASE_URL - Base URL for short links
    PATH_PREFIX - Path prefix for all routes (e.g. /api)
    JWT_SECRET - Session token signing secret
    ENVIRONMENT - 'production' hides internal error details
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from linfy.config import load_config
from linfy.database import create_database
from linfy.database.cache import RedisCache
from linfy.service import LinkService
from linfy.accounts import AccountService
from linfy.auth import Authenticator, PasswordHasher, SessionTokenIssuer
from linfy.ratelimit import RateLimiter
from linfy.shortcode import ShortCodeGenerator
from linfy.common.logging_config import setup_logging
from linfy_web import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting Linfy service...")

    # Initialize database
    db_instance = create_database(config, logger=logger)
    logger.info(f"Using {type(db_instance).__name__}")

    # Initialize Redis (optional)
    if config.redis_url:
        logger.info("Connecting to Redis")
        cache_instance = RedisCache(redis_url=config.redis_url, logger=logger)
        await cache_instance.connect()
    else:
        logger.info("Redis disabled; rate-limit counters kept in process")
        cache_instance = None

    # Initialize services
    tokens = SessionTokenIssuer(
        secret=config.jwt_secret,
        expires_seconds=config.jwt_expires_seconds,
        algorithm=config.jwt_algorithm,
    )
    link_service = LinkService(
        db=db_instance,
        base_url=config.base_url,
        path_prefix=config.route_prefix,
        cache=cache_instance,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        logger=logger,
        max_collision_retries=config.max_collision_retries,
    )
    account_service = AccountService(
        db=db_instance,
        hasher=PasswordHasher(rounds=config.bcrypt_rounds),
        tokens=tokens,
        max_api_keys=config.max_api_keys,
        logger=logger,
    )

    # Update app state
    app.state.db = db_instance
    app.state.cache = cache_instance
    app.state.link_service = link_service
    app.state.account_service = account_service
    app.state.authenticator = Authenticator(db=db_instance, tokens=tokens, logger=logger)
    if config.rate_limit_enabled:
        app.state.rate_limiter = RateLimiter(
            max_requests=config.rate_limit_max_requests,
            window_seconds=config.rate_limit_window_seconds,
            cache=cache_instance,
            logger=logger,
        )

    logger.info("Service started successfully")

    # Yield control to the application
    yield

    # Shutdown
    logger.info("Shutting down Linfy service...")

    await link_service.close()

    logger.info("Service stopped")


def main():
    """Main entry point."""
    # Load configuration
    config = load_config()

    # Setup logging
    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Linfy URL Shortener Service")
    logger.info(f"Configuration: {config.safe_dump()}")

    if config.is_production and config.database_url.startswith("memory://"):
        logger.warning("In-memory store in production: data is lost on restart")

    # Create FastAPI app; services are attached in lifespan
    app = create_app(config=config)

    app.state.logger = logger

    # Override lifespan
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    # Setup signal handlers for graceful shutdown
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    # Run server
    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
