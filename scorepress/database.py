"""
ScorePress Backend — Record Store Connection Management
=========================================================

What:  MongoDB client construction, the per-request collection dependency,
       index bootstrap, and shutdown.
Why:   Centralizes all record store connection logic in one place.
How:   The lifespan handler builds ONE AsyncMongoClient and keeps it on
       `app.state`; routes receive the student collection through
       `get_student_collection`, and services receive it as an argument.
Who:   Lifespan (main.py) owns the client; route handlers depend on the collection.

Architecture Decision:
    There is no module-level client. The handle is created explicitly at
    startup and injected, so:
    1. Tests swap in a mock collection via `app.dependency_overrides`
    2. Import has no side effects (no connection attempt on import)
    3. Shutdown closes exactly the client that startup opened

    AsyncMongoClient connects lazily: creating it never blocks, and the
    first real operation waits up to serverSelectionTimeoutMS for a server.
"""

import logging
from typing import Any

from fastapi import Request
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from scorepress.config import Settings

logger = logging.getLogger(__name__)


def create_mongo_client(config: Settings) -> AsyncMongoClient:
    """
    Build the process's MongoDB client from settings.

    Called once from the lifespan handler; the result is stored on
    `app.state.mongo_client` and closed by `close_mongo_client`.
    """
    client: AsyncMongoClient = AsyncMongoClient(
        config.mongo_db_url,
        serverSelectionTimeoutMS=config.mongo_server_selection_timeout_ms,
        appname="scorepress",
    )
    logger.info(
        "MongoDB client created (db=%s, collection=%s)",
        config.mongo_db_name,
        config.mongo_collection,
    )
    return client


def student_collection(client: AsyncMongoClient, config: Settings) -> AsyncCollection:
    """Resolve the StudentDetails collection from a client."""
    return client[config.mongo_db_name][config.mongo_collection]


async def ensure_indexes(collection: AsyncCollection) -> None:
    """
    Create the lookup index on `first_name` if it does not exist.

    Non-unique: the same first name may be saved many times.
    Best effort: a store that is down at startup must not keep the API
    from starting, so failures are logged and swallowed here only.
    """
    try:
        await collection.create_index([("first_name", ASCENDING)], name="idx_first_name")
        logger.info("Index idx_first_name ensured on %s", collection.name)
    except PyMongoError as e:
        logger.warning("Could not ensure indexes on %s: %s", collection.name, str(e))


async def ping(client: AsyncMongoClient) -> bool:
    """Lightweight connectivity check used by /health."""
    try:
        await client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.warning("MongoDB ping failed: %s", str(e))
        return False


async def close_mongo_client(client: Any) -> None:
    """Close all pooled connections. Called during application shutdown."""
    if client is not None:
        await client.close()
        logger.info("MongoDB client closed")


# ── Request Dependency ────────────────────────────────────────────────────
def get_student_collection(request: Request) -> AsyncCollection:
    """
    FastAPI dependency that provides the StudentDetails collection.

    Example usage in a route:
        @router.post("/getStudentDetails")
        async def get_student(db: AsyncCollection = Depends(get_student_collection)):
            ...
    """
    return request.app.state.student_collection
