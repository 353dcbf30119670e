from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog

from pairhub.auth.github import GitHubProfile
from pairhub.models import User
from pairhub.repositories.base import UserRepository
from pairhub.services.exceptions import ConflictError, NotFoundError

logger = structlog.get_logger(__name__)

OnCreated = Callable[[User], Awaitable[None] | None]


def user_from_profile(profile: GitHubProfile) -> User:
    return User(
        user_id=profile.node_id,
        username=profile.username,
        name=profile.display_name,
        bio=profile.bio,
        avatar_url=profile.avatar_url,
        github_url=profile.profile_url,
        email=profile.primary_email,
        seen_welcome_modal=False,
    )


async def find_or_create_github_user(
    users: UserRepository,
    profile: GitHubProfile,
    on_created: OnCreated | None = None,
) -> tuple[User, bool]:
    """Return the user for a GitHub profile, creating it on first login.

    Existing users are returned as stored; profile changes on GitHub are not
    copied over. ``on_created`` runs only for newly inserted users.
    """
    existing = await users.find_by_user_id(profile.node_id)
    if existing is not None:
        return existing, False

    try:
        user = await users.insert(user_from_profile(profile))
    except ConflictError:
        # Two callbacks for the same account raced; the other insert won
        winner = await users.find_by_user_id(profile.node_id)
        if winner is None:
            raise
        return winner, False

    if on_created is not None:
        result = on_created(user)
        if result is not None:
            await result
    return user, True


async def consume_welcome(users: UserRepository, user: User) -> bool:
    """True the first time it is called for a user; flips seenWelcomeModal."""
    if user.seen_welcome_modal:
        return False
    await users.mark_welcome_seen(user.id)
    logger.info("welcome_modal_consumed", user_id=user.user_id)
    return True


async def get_user_by_username(users: UserRepository, username: str) -> User:
    user = await users.find_by_username(username.strip().lstrip("@"))
    if user is None:
        raise NotFoundError("user_not_found", f"no user named {username}")
    return user
