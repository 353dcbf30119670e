from __future__ import annotations

from pairhub.repositories.base import SessionStore, UserRepository
from pairhub.repositories.sessions import InMemorySessionStore, MongoSessionStore
from pairhub.repositories.users import InMemoryUserRepository, MongoUserRepository

__all__ = [
    "UserRepository",
    "SessionStore",
    "MongoUserRepository",
    "InMemoryUserRepository",
    "MongoSessionStore",
    "InMemorySessionStore",
]
