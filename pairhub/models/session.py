from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class SessionRecord:
    """Server-side session state, stored under the hash of the cookie token."""

    sid: str
    expires: datetime
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> str | None:
        return self.data.get("user_id")

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        expires = self.expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return expires <= now

    def to_document(self) -> dict[str, Any]:
        return {"_id": self.sid, "session": dict(self.data), "expires": self.expires}

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> SessionRecord:
        return cls(sid=doc["_id"], expires=doc["expires"], data=dict(doc.get("session") or {}))
