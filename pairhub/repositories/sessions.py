from __future__ import annotations

from datetime import datetime
from typing import Any

from pairhub.models import SessionRecord
from pairhub.repositories.base import SessionStore


class MongoSessionStore(SessionStore):
    """Sessions collection, one document per session.

    Documents look like ``{"_id": sid, "session": {...}, "expires": datetime}``;
    the TTL index on ``expires`` removes stale ones server-side, and reads
    filter them out in the meantime.
    """

    def __init__(self, collection: Any) -> None:
        self.collection = collection

    async def get(self, sid: str) -> SessionRecord | None:
        doc = await self.collection.find_one({"_id": sid})
        if not doc:
            return None
        record = SessionRecord.from_document(doc)
        if record.is_expired():
            await self.destroy(sid)
            return None
        return record

    async def set(self, record: SessionRecord) -> None:
        await self.collection.replace_one({"_id": record.sid}, record.to_document(), upsert=True)

    async def touch(self, sid: str, expires: datetime) -> None:
        await self.collection.update_one({"_id": sid}, {"$set": {"expires": expires}})

    async def destroy(self, sid: str) -> None:
        await self.collection.delete_one({"_id": sid})


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}

    async def get(self, sid: str) -> SessionRecord | None:
        record = self._sessions.get(sid)
        if record is None:
            return None
        if record.is_expired():
            self._sessions.pop(sid, None)
            return None
        return SessionRecord(sid=record.sid, expires=record.expires, data=dict(record.data))

    async def set(self, record: SessionRecord) -> None:
        self._sessions[record.sid] = SessionRecord(
            sid=record.sid, expires=record.expires, data=dict(record.data)
        )

    async def touch(self, sid: str, expires: datetime) -> None:
        record = self._sessions.get(sid)
        if record is not None:
            record.expires = expires

    async def destroy(self, sid: str) -> None:
        self._sessions.pop(sid, None)

    def __len__(self) -> int:
        return len(self._sessions)
