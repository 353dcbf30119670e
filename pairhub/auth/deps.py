from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from pairhub.auth.session import get_session_manager
from pairhub.core.config import settings
from pairhub.models import User
from pairhub.repositories.base import SessionStore, UserRepository
from pairhub.repositories.factory import get_session_store, get_user_repository

Users = Annotated[UserRepository, Depends(get_user_repository)]


async def get_optional_user(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
    users: Users,
) -> User | None:
    # Nobody can be logged in without the login routes or a cookie; the
    # session secret is only resolved past this point.
    login_enabled = getattr(request.app.state, "github_client", None) is not None
    if not login_enabled or settings.session_cookie_name not in request.cookies:
        return None

    session = await get_session_manager(store).load(request)
    if session is None or not session.user_id:
        return None
    return await users.get(session.user_id)


async def get_current_user(user: Annotated[User | None, Depends(get_optional_user)]) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="not logged in")
    return user


OptionalUser = Annotated[User | None, Depends(get_optional_user)]
CurrentUser = Annotated[User, Depends(get_current_user)]
