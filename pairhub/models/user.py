from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class User:
    """A PairHub member, created on first GitHub login.

    `user_id` holds the GitHub node id and is unique across the collection;
    `id` is the document's own key and is what sessions point at.
    """

    user_id: str
    username: str
    name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    github_url: str | None = None
    email: str | None = None
    seen_welcome_modal: bool = False
    created_at: datetime = field(default_factory=_now)
    id: str = field(default_factory=lambda: str(ObjectId()))

    def to_document(self) -> dict[str, Any]:
        return {
            "_id": ObjectId(self.id),
            "userId": self.user_id,
            "username": self.username,
            "name": self.name,
            "bio": self.bio,
            "avatar_url": self.avatar_url,
            "github_url": self.github_url,
            "email": self.email,
            "seenWelcomeModal": self.seen_welcome_modal,
            "created_at": self.created_at,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> User:
        return cls(
            id=str(doc["_id"]),
            user_id=doc["userId"],
            username=doc["username"],
            name=doc.get("name"),
            bio=doc.get("bio"),
            avatar_url=doc.get("avatar_url"),
            github_url=doc.get("github_url"),
            email=doc.get("email"),
            seen_welcome_modal=bool(doc.get("seenWelcomeModal", False)),
            created_at=doc.get("created_at") or _now(),
        )

    @property
    def profile_path(self) -> str:
        return f"/@{self.username}"
