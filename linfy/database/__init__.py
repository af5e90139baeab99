"""Database layer for Linfy."""

from .base import LinfyDBBase, DuplicateKeyError
from .memory import LinfyMemoryDB
from .postgres import LinfyPostgresDB
from .cache import RedisCache
from .models import ApiKey, Link, User

__all__ = [
    "LinfyDBBase",
    "DuplicateKeyError",
    "LinfyMemoryDB",
    "LinfyPostgresDB",
    "RedisCache",
    "ApiKey",
    "Link",
    "User",
]


def create_database(config, logger=None) -> LinfyDBBase:
    """Build the store selected by ``config.database_url``.

    ``memory://`` selects the in-process store; anything else is treated as
    a PostgreSQL URL.
    """
    if config.database_url.startswith("memory://"):
        return LinfyMemoryDB(db_config=config.database_url, logger=logger)
    return LinfyPostgresDB(
        db_config=config.database_url,
        pool_max_size=config.database_pool_max_size,
        create_tables=config.database_create_tables,
        logger=logger,
    )
