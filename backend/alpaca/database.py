"""
Alpaca API — Database Client Management
========================================

What:  The shared pymongo async client, the database dependency and lifecycle helpers.
Why:   Keeps all connection handling in one place; handlers only see a database.
How:   A single AsyncMongoClient is created on first use and reused by every
       request. Route handlers receive the database through FastAPI's
       dependency injection (`Depends(get_database)`), which tests override.
When:  Client is created lazily; it is closed during application shutdown.

Connection pooling, reconnects and server selection are left to the driver.
"""

import logging
from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from alpaca.config import settings
from alpaca.exceptions import DatabaseError

logger = logging.getLogger(__name__)

_client: Optional[AsyncMongoClient] = None


def init_client() -> AsyncMongoClient:
    """
    Create the process-wide client.

    Raises:
        RuntimeError: the client was already initialised.
        DatabaseError: the driver rejected the connection URL or options.
    """
    global _client
    if _client is not None:
        raise RuntimeError("init_client() was already called")

    try:
        _client = AsyncMongoClient(
            settings.mongodb_url,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        )
    except (PyMongoError, ValueError) as e:
        logger.error("Database client error: %s", str(e))
        raise DatabaseError(
            message="Could not create the database client.",
            context={"original_error": str(e)},
        )

    logger.info("MongoDB client created for database '%s'", settings.mongodb_database)
    return _client


def get_client() -> AsyncMongoClient:
    """Return the shared client, creating it on first use."""
    if _client is None:
        return init_client()
    return _client


def get_database() -> AsyncDatabase:
    """
    FastAPI dependency that provides the configured database.

    Example usage in a route:
        @router.get("/projects")
        async def list_projects(db: AsyncDatabase = Depends(get_database)):
            return await db["projects"].find({}).to_list(length=None)
    """
    return get_client()[settings.mongodb_database]


async def ping() -> bool:
    """Round-trip a `ping` command; False when the server cannot be reached."""
    try:
        await get_client().admin.command("ping")
    except (PyMongoError, DatabaseError) as e:
        logger.warning("Database ping failed: %s", str(e))
        return False
    return True


async def dispose_client() -> None:
    """Close the shared client (if one was created) and forget it."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
