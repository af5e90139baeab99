"""Pytest configuration and fixtures."""

import os
import pytest
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport

from linfy.config import Config
from linfy.database.base import LinfyDBBase
from linfy.database.memory import LinfyMemoryDB
from linfy.database.postgres import LinfyPostgresDB
from linfy.service import LinkService
from linfy.accounts import AccountService
from linfy.auth import Authenticator, PasswordHasher, SessionTokenIssuer
from linfy.shortcode import ShortCodeGenerator
from linfy.common.logging_config import setup_logging
from linfy_web import create_app


TEST_SECRET = "linfy-test-secret-with-enough-bytes-for-hs256"


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture(params=["memory", "postgres"])
async def test_db(request, logger) -> AsyncGenerator[LinfyDBBase, None]:
    """Create test database instance.

    Every store test runs against the in-memory store, and against PostgreSQL
    too when TEST_DATABASE_URL points at a disposable database (its tables
    are truncated before each test).
    """
    if request.param == "postgres":
        db_url = os.getenv("TEST_DATABASE_URL")
        if not db_url:
            pytest.skip("TEST_DATABASE_URL not set")
        db = LinfyPostgresDB(db_config=db_url, logger=logger)
        await db.ensure_tables()
        async with db._get_connection() as conn:
            await conn.execute("TRUNCATE links, api_keys, users")
    else:
        db = LinfyMemoryDB(logger=logger)

    yield db

    await db.close()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=8)


@pytest.fixture
def hasher():
    """Cheap bcrypt work factor keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return SessionTokenIssuer(secret=TEST_SECRET)


@pytest.fixture
def authenticator(test_db, tokens, logger):
    return Authenticator(db=test_db, tokens=tokens, logger=logger)


@pytest.fixture
async def service(test_db, short_code_generator, logger) -> LinkService:
    """Create link service instance."""
    return LinkService(
        db=test_db,
        base_url="http://testserver",
        cache=None,  # No cache for tests
        short_code_generator=short_code_generator,
        logger=logger,
    )


@pytest.fixture
async def accounts(test_db, hasher, tokens, logger) -> AccountService:
    """Create account service instance."""
    return AccountService(db=test_db, hasher=hasher, tokens=tokens, logger=logger)


@pytest.fixture
def config():
    """Test configuration (in-memory store, no rate limiting)."""
    return Config(
        database_url="memory://",
        base_url="http://testserver",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        rate_limit_enabled=False,
    )


@pytest.fixture
async def app(config, test_db, service, accounts, authenticator):
    """Create test FastAPI app."""
    return create_app(
        config=config,
        db_instance=test_db,
        cache_instance=None,
        link_service=service,
        account_service=accounts,
        authenticator=authenticator,
        rate_limiter=None,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
async def user(accounts):
    """A registered user with a session token."""
    await accounts.register("Ada", "ada@example.com", "secret1")
    result = await accounts.login("ada@example.com", "secret1")
    return {
        "id": result["user"]["id"],
        "token": result["token"],
        "headers": {"Authorization": f"Bearer {result['token']}"},
    }


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
