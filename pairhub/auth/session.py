from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Annotated, Any

import structlog
from fastapi import Depends, Request, Response

from pairhub.core.config import settings
from pairhub.models import SessionRecord
from pairhub.repositories.base import SessionStore
from pairhub.repositories.factory import get_session_store

logger = structlog.get_logger(__name__)

_fallback_secret: str | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def session_secret() -> str:
    """SESSION_SECRET, or a per-process random one outside production."""
    global _fallback_secret
    if settings.session_secret:
        return settings.session_secret
    if settings.is_production:
        raise RuntimeError("SESSION_SECRET must be set in production")
    if _fallback_secret is None:
        _fallback_secret = secrets.token_urlsafe(32)
        logger.warning("session_secret_missing", detail="using a random secret; sessions end on restart")
    return _fallback_secret


class SessionManager:
    """Cookie <-> server-side session glue.

    The cookie carries a random token; the store only ever sees its salted
    SHA-256 hash, so a leaked sessions collection cannot be replayed.
    """

    def __init__(
        self,
        store: SessionStore,
        secret: str,
        cookie_name: str = "pairhub.sid",
        ttl: timedelta = timedelta(days=14),
        secure: bool = False,
    ) -> None:
        self.store = store
        self.secret = secret
        self.cookie_name = cookie_name
        self.ttl = ttl
        self.secure = secure

    def hash_token(self, raw_token: str) -> str:
        data = f"{raw_token}{self.secret}".encode("utf-8")
        return hashlib.sha256(data).hexdigest()

    async def load(self, request: Request) -> SessionRecord | None:
        cached = getattr(request.state, "session", None)
        if cached is not None:
            return cached

        raw = request.cookies.get(self.cookie_name)
        if not raw:
            return None
        record = await self.store.get(self.hash_token(raw))
        if record is None:
            return None

        # Every request slides the expiry window forward, cookie included
        record.expires = _now() + self.ttl
        await self.store.touch(record.sid, record.expires)
        request.state.session = record
        request.state.refresh_session_cookie = partial(self.set_cookie, raw_token=raw)
        return record

    async def start(self, response: Response, data: dict[str, Any] | None = None) -> SessionRecord:
        raw = secrets.token_urlsafe(32)
        record = SessionRecord(sid=self.hash_token(raw), expires=_now() + self.ttl, data=dict(data or {}))
        await self.store.set(record)
        self.set_cookie(response, raw)
        return record

    async def save(self, record: SessionRecord) -> None:
        await self.store.set(record)

    async def regenerate(
        self,
        current: SessionRecord | None,
        response: Response,
        data: dict[str, Any],
    ) -> SessionRecord:
        """Swap ``current`` for a fresh session id carrying ``data``."""
        if current is not None:
            await self.store.destroy(current.sid)
        return await self.start(response, data)

    async def destroy(self, request: Request, response: Response) -> None:
        raw = request.cookies.get(self.cookie_name)
        if raw:
            await self.store.destroy(self.hash_token(raw))
        request.state.session = None
        request.state.refresh_session_cookie = None
        self.clear_cookie(response)

    def set_cookie(self, response: Response, raw_token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=raw_token,
            httponly=True,
            secure=self.secure,
            samesite="lax",
            max_age=int(self.ttl.total_seconds()),
            path="/",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(key=self.cookie_name, path="/")


def get_session_manager(
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionManager:
    return SessionManager(
        store,
        secret=session_secret(),
        cookie_name=settings.session_cookie_name,
        ttl=timedelta(days=settings.session_ttl_days),
        secure=settings.is_production,
    )


Sessions = Annotated[SessionManager, Depends(get_session_manager)]
