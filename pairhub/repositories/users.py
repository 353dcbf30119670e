from __future__ import annotations

from dataclasses import replace
from typing import Any

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from pairhub.models import User
from pairhub.repositories.base import UserRepository
from pairhub.services.exceptions import ConflictError

logger = structlog.get_logger(__name__)


def _object_id(id: str) -> ObjectId | None:
    try:
        return ObjectId(id)
    except (InvalidId, TypeError):
        return None


class MongoUserRepository(UserRepository):
    """Users collection. `userId` carries a unique index (see db.ensure_indexes)."""

    def __init__(self, collection: Any) -> None:
        self.collection = collection

    async def _find_one(self, query: dict[str, Any]) -> User | None:
        doc = await self.collection.find_one(query)
        if not doc:
            return None
        return User.from_document(doc)

    async def get(self, id: str) -> User | None:
        oid = _object_id(id)
        if oid is None:
            return None
        return await self._find_one({"_id": oid})

    async def find_by_user_id(self, user_id: str) -> User | None:
        return await self._find_one({"userId": user_id})

    async def find_by_username(self, username: str) -> User | None:
        return await self._find_one({"username": username})

    async def insert(self, user: User) -> User:
        try:
            await self.collection.insert_one(user.to_document())
        except DuplicateKeyError as exc:
            raise ConflictError("user_exists", f"user {user.user_id} already exists") from exc
        logger.info("user_created", user_id=user.user_id, username=user.username)
        return user

    async def mark_welcome_seen(self, id: str) -> None:
        oid = _object_id(id)
        if oid is None:
            return
        await self.collection.update_one({"_id": oid}, {"$set": {"seenWelcomeModal": True}})


class InMemoryUserRepository(UserRepository):
    """Process-local user store for tests and local runs without MongoDB."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    async def get(self, id: str) -> User | None:
        return self._users.get(id)

    async def find_by_user_id(self, user_id: str) -> User | None:
        return next((u for u in self._users.values() if u.user_id == user_id), None)

    async def find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    async def insert(self, user: User) -> User:
        if await self.find_by_user_id(user.user_id) is not None:
            raise ConflictError("user_exists", f"user {user.user_id} already exists")
        self._users[user.id] = user
        return user

    async def mark_welcome_seen(self, id: str) -> None:
        user = self._users.get(id)
        if user is not None:
            self._users[id] = replace(user, seen_welcome_modal=True)

    def __len__(self) -> int:
        return len(self._users)
