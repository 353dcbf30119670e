from fastapi import APIRouter
from pydantic import BaseModel

from pairhub.auth.deps import CurrentUser

router = APIRouter(prefix="/api", tags=["me"])


class MeOut(BaseModel):
    id: str
    user_id: str
    username: str
    name: str | None
    bio: str | None
    avatar_url: str | None
    github_url: str | None
    email: str | None
    seen_welcome_modal: bool


@router.get("/me", response_model=MeOut)
async def me(user: CurrentUser):
    return MeOut(
        id=user.id,
        user_id=user.user_id,
        username=user.username,
        name=user.name,
        bio=user.bio,
        avatar_url=user.avatar_url,
        github_url=user.github_url,
        email=user.email,
        seen_welcome_modal=user.seen_welcome_modal,
    )
