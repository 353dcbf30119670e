from __future__ import annotations

from functools import lru_cache

from pairhub.core.config import settings
from pairhub.db import SESSIONS_COLLECTION, USERS_COLLECTION, get_database
from pairhub.repositories.base import SessionStore, UserRepository
from pairhub.repositories.sessions import InMemorySessionStore, MongoSessionStore
from pairhub.repositories.users import InMemoryUserRepository, MongoUserRepository


def _backend(backend: str | None) -> str:
    return (backend or settings.store_backend).strip().lower()


def create_user_repository(backend: str | None = None) -> UserRepository:
    selected = _backend(backend)
    if selected == "mongodb":
        return MongoUserRepository(get_database()[USERS_COLLECTION])
    if selected == "inmemory":
        return InMemoryUserRepository()
    raise ValueError(f"unsupported store backend: {selected}")


def create_session_store(backend: str | None = None) -> SessionStore:
    selected = _backend(backend)
    if selected == "mongodb":
        return MongoSessionStore(get_database()[SESSIONS_COLLECTION])
    if selected == "inmemory":
        return InMemorySessionStore()
    raise ValueError(f"unsupported store backend: {selected}")


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    return create_user_repository()


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    return create_session_store()
