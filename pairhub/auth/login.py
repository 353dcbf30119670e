from __future__ import annotations

import secrets
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from pairhub.auth.deps import Users
from pairhub.auth.github import GitHubOAuthClient
from pairhub.auth.session import Sessions
from pairhub.core.config import Settings
from pairhub.models import User
from pairhub.services.exceptions import UpstreamError
from pairhub.services.users_service import consume_welcome, find_or_create_github_user
from pairhub.worker.tasks import queue_slack_invite

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["auth"])

STATE_KEY = "oauth_state"


def get_github_client(request: Request) -> GitHubOAuthClient:
    return request.app.state.github_client


GitHub = Annotated[GitHubOAuthClient, Depends(get_github_client)]


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


async def _on_user_created(user: User) -> None:
    await run_in_threadpool(queue_slack_invite, user)


@router.get("/login/github")
async def login_github(request: Request, sessions: Sessions, github: GitHub):
    state = secrets.token_urlsafe(24)
    response = _redirect(github.authorize_url(state))

    session = await sessions.load(request)
    if session is None:
        await sessions.start(response, {STATE_KEY: state})
    else:
        session.data[STATE_KEY] = state
        await sessions.save(session)
    return response


@router.get("/login/github/callback")
async def github_callback(
    request: Request,
    sessions: Sessions,
    users: Users,
    github: GitHub,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
):
    failure = _redirect("/")

    if error:
        logger.warning("github_login_denied", error=error)
        return failure

    session = await sessions.load(request)
    expected = None
    if session is not None:
        expected = session.data.pop(STATE_KEY, None)
        if expected is not None:
            await sessions.save(session)
    if not code or not expected or not secrets.compare_digest(expected.encode(), (state or "").encode()):
        logger.warning("github_login_bad_callback", has_code=bool(code), has_session=session is not None)
        return failure

    try:
        profile = await github.authenticate(code)
    except UpstreamError as exc:
        logger.warning("github_login_failed", code=exc.code, reason=exc.message)
        return failure

    user, created = await find_or_create_github_user(users, profile, on_created=_on_user_created)
    logger.info("github_login", user_id=user.user_id, created=created)

    target = "/?welcome" if await consume_welcome(users, user) else "/"
    response = _redirect(target)
    await sessions.regenerate(session, response, {"user_id": user.id})
    return response


@router.get("/logout")
async def logout(request: Request, sessions: Sessions):
    response = _redirect("/")
    await sessions.destroy(request, response)
    return response


def setup_github_login(app: FastAPI, settings: Settings) -> bool:
    """Register GitHub login on ``app``; returns False when it is disabled."""
    if not settings.github_client_id:
        logger.warning("github_login_disabled", detail="GitHub client ID not passed; login won't work.")
        return False
    if settings.is_production and not settings.session_secret:
        logger.warning("github_login_disabled", detail="SESSION_SECRET not set; login won't work.")
        return False

    app.state.github_client = GitHubOAuthClient(
        client_id=settings.github_client_id,
        client_secret=settings.github_client_secret,
        callback_url=settings.callback_url,
        scope=settings.github_scope,
    )
    app.include_router(router)
    return True
