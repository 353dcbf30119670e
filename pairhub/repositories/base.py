from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from pairhub.models import SessionRecord, User


class UserRepository(ABC):
    @abstractmethod
    async def get(self, id: str) -> User | None:
        """Return the user stored under its document id."""

    @abstractmethod
    async def find_by_user_id(self, user_id: str) -> User | None:
        """Return the user with the given external identity id."""

    @abstractmethod
    async def find_by_username(self, username: str) -> User | None:
        """Return the user with the given GitHub login."""

    @abstractmethod
    async def insert(self, user: User) -> User:
        """Store a new user; raise ConflictError if the identity id exists."""

    @abstractmethod
    async def mark_welcome_seen(self, id: str) -> None:
        """Flip seenWelcomeModal to true."""


class SessionStore(ABC):
    @abstractmethod
    async def get(self, sid: str) -> SessionRecord | None:
        """Return the stored session, or None when missing or expired."""

    @abstractmethod
    async def set(self, record: SessionRecord) -> None:
        """Create or replace a session."""

    @abstractmethod
    async def touch(self, sid: str, expires: datetime) -> None:
        """Push a session's expiry forward."""

    @abstractmethod
    async def destroy(self, sid: str) -> None:
        """Delete a session if it exists."""
