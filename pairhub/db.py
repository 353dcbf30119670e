from __future__ import annotations

from typing import Any

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from pairhub.core.config import settings

logger = structlog.get_logger(__name__)

USERS_COLLECTION = "users"
SESSIONS_COLLECTION = "sessions"

_client: AsyncIOMotorClient[dict[str, Any]] | None = None


def get_client() -> AsyncIOMotorClient[dict[str, Any]]:
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
    return _client


def get_database() -> AsyncIOMotorDatabase[dict[str, Any]]:
    return get_client()[settings.mongodb_database]


async def ensure_indexes(db: AsyncIOMotorDatabase[dict[str, Any]]) -> None:
    users = db[USERS_COLLECTION]
    await users.create_index([("userId", ASCENDING)], unique=True, name="uniq_user_id")
    await users.create_index([("username", ASCENDING)], name="username")

    # Mongo drops sessions once `expires` has passed
    sessions = db[SESSIONS_COLLECTION]
    await sessions.create_index([("expires", ASCENDING)], expireAfterSeconds=0, name="ttl_expires")

    logger.info("mongodb_indexes_ready", database=db.name)


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
