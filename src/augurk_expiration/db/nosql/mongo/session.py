from __future__ import annotations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from augurk_expiration.db.settings import get_store_settings
from augurk_expiration.exceptions import StoreNotInitializedError

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None


async def initialize_mongo(
    url: Optional[str] = None,
    database: Optional[str] = None,
    *,
    server_selection_timeout_ms: Optional[int] = None,
) -> AsyncIOMotorDatabase:
    """Create the process-wide Motor client; later calls reuse it."""
    global _client, _db
    if _db is not None:
        return _db

    settings = get_store_settings()
    url = url or settings.resolved_url
    database = database or settings.resolved_database
    timeout = server_selection_timeout_ms or settings.server_selection_timeout_ms

    # tz_aware so metadata timestamps come back as aware UTC datetimes
    _client = AsyncIOMotorClient(url, tz_aware=True, serverSelectionTimeoutMS=timeout)
    _db = _client[database]
    logger.info("Mongo client initialized: database=%s", database)
    return _db


def get_mongo_db() -> AsyncIOMotorDatabase:
    if _db is None:
        raise StoreNotInitializedError()
    return _db


async def dispose_mongo() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("Mongo client closed")
    _client = None
    _db = None
