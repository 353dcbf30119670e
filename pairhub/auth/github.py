"""GitHub OAuth 2.0 web flow.

The browser is sent to GitHub's authorize page, GitHub redirects back to the
callback with a one-time ``code``, and the code is exchanged server-side for
an access token which is then used to read the user's profile.

Reference:
    https://docs.github.com/en/apps/oauth-apps/building-oauth-apps/authorizing-oauth-apps
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from pairhub.services.exceptions import UpstreamError

logger = structlog.get_logger(__name__)

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
API_BASE_URL = "https://api.github.com"


@dataclass(frozen=True)
class GitHubProfile:
    """Normalized GitHub profile, plus the raw ``/user`` payload in ``raw``."""

    node_id: str
    username: str
    display_name: str | None
    bio: str | None
    avatar_url: str | None
    profile_url: str | None
    emails: list[str] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def primary_email(self) -> str | None:
        return self.emails[0] if self.emails else None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GitHubProfile:
        node_id = data.get("node_id")
        login = data.get("login")
        if not node_id or not login:
            raise UpstreamError("github_profile_invalid", "GitHub profile lacks node_id or login")
        email = data.get("email")
        return cls(
            node_id=node_id,
            username=login,
            display_name=data.get("name"),
            bio=data.get("bio"),
            avatar_url=data.get("avatar_url"),
            profile_url=data.get("html_url"),
            emails=[email] if email else [],
            raw=data,
        )


class GitHubOAuthClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str | None,
        callback_url: str,
        scope: list[str] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self.scope = scope if scope is not None else ["user:email"]
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            headers={"User-Agent": "PairHub"},
        )

    def authorize_url(self, state: str) -> str:
        query = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "scope": " ".join(self.scope),
            "state": state,
        }
        return f"{AUTHORIZE_URL}?{urlencode(query)}"

    async def exchange_code(self, code: str) -> str:
        """Trade the callback ``code`` for an access token."""
        try:
            async with self._client() as client:
                response = await client.post(
                    TOKEN_URL,
                    headers={"Accept": "application/json"},
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret or "",
                        "code": code,
                        "redirect_uri": self.callback_url,
                    },
                )
        except httpx.RequestError as exc:
            logger.warning("github_token_exchange_connection_error", error=str(exc))
            raise UpstreamError("github_unavailable", f"failed to reach GitHub: {exc}") from exc

        if response.status_code != 200:
            logger.warning("github_token_exchange_failed", status_code=response.status_code)
            raise UpstreamError("github_token_exchange_failed", f"GitHub answered {response.status_code}")

        # GitHub reports bad codes with 200 and an ``error`` field
        payload = response.json()
        token = payload.get("access_token")
        if not token:
            logger.warning(
                "github_token_exchange_rejected",
                error=payload.get("error"),
                description=payload.get("error_description"),
            )
            raise UpstreamError("github_token_exchange_rejected", payload.get("error") or "no access token")
        return token

    async def fetch_profile(self, access_token: str) -> GitHubProfile:
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{API_BASE_URL}/user",
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": "application/vnd.github+json",
                    },
                )
        except httpx.RequestError as exc:
            logger.warning("github_profile_connection_error", error=str(exc))
            raise UpstreamError("github_unavailable", f"failed to reach GitHub: {exc}") from exc

        if response.status_code != 200:
            logger.warning("github_profile_failed", status_code=response.status_code)
            raise UpstreamError("github_profile_failed", f"GitHub answered {response.status_code}")
        return GitHubProfile.from_api(response.json())

    async def authenticate(self, code: str) -> GitHubProfile:
        token = await self.exchange_code(code)
        return await self.fetch_profile(token)
