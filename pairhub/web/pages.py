from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from pairhub.api.errors import status_for_service_error
from pairhub.auth.deps import OptionalUser, Users
from pairhub.models import User
from pairhub.services.exceptions import NotFoundError
from pairhub.services.users_service import get_user_by_username

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")

TWITTER_CARD = {
    "twitter:card": "summary",
    "twitter:site": "@pairhub",
    "twitter:title": "PairHub",
    "twitter:description": "Find remote pair programming partners",
    "twitter:image": "https://pairhub.io/static/pairhub-logo-white-180.png",
}


def _context(request: Request, user: User | None, **extra: Any) -> dict[str, Any]:
    return {
        "current_user": user,
        "login_enabled": getattr(request.app.state, "github_client", None) is not None,
        **extra,
    }


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, user: OptionalUser, s: str | None = None):
    # Only the bare flag counts (?welcome), matching the callback redirect
    show_welcome = request.query_params.get("welcome") == ""
    return templates.TemplateResponse(
        request,
        "index.html",
        _context(
            request,
            user,
            show_welcome=show_welcome,
            search_phrase=s,
            twitter_card=TWITTER_CARD,
        ),
    )


async def _profile_page(request: Request, user: User | None, users, username: str):
    try:
        member = await get_user_by_username(users, username)
    except NotFoundError as err:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            _context(request, user, message=err.message),
            status_code=status_for_service_error(err),
        )
    return templates.TemplateResponse(request, "profile.html", _context(request, user, member=member))


@router.get("/@{username}", response_class=HTMLResponse)
async def profile_by_handle(request: Request, username: str, user: OptionalUser, users: Users):
    return await _profile_page(request, user, users, username)


@router.get("/profile", response_class=HTMLResponse)
async def profile(request: Request, username: str, user: OptionalUser, users: Users):
    return await _profile_page(request, user, users, username)
