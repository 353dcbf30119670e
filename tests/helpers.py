from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from pairhub.auth.github import GitHubOAuthClient, GitHubProfile
from pairhub.services.exceptions import UpstreamError


def make_profile(
    node_id: str = "MDQ6VXNlcjU4MzIzMQ==",
    username: str = "octocat",
    email: str | None = "octocat@github.com",
    **overrides,
) -> GitHubProfile:
    fields = {
        "node_id": node_id,
        "username": username,
        "display_name": "The Octocat",
        "bio": "I like pairing",
        "avatar_url": f"https://avatars.githubusercontent.com/u/{username}",
        "profile_url": f"https://github.com/{username}",
        "emails": [email] if email else [],
    }
    fields.update(overrides)
    return GitHubProfile(**fields)


class FakeGitHubClient(GitHubOAuthClient):
    """Real authorize URL building, canned answers for the code exchange."""

    def __init__(self) -> None:
        super().__init__(
            client_id="test-client-id",
            client_secret="test-client-secret",
            callback_url="http://localhost:3000/login/github/callback",
        )
        self.profiles: dict[str, GitHubProfile] = {"good-code": make_profile()}
        self.calls: list[str] = []

    async def authenticate(self, code: str) -> GitHubProfile:
        self.calls.append(code)
        if code not in self.profiles:
            raise UpstreamError("github_token_exchange_rejected", "bad_verification_code")
        return self.profiles[code]


def start_login(client: TestClient):
    return client.get("/login/github", follow_redirects=False)


def state_from(resp) -> str:
    return parse_qs(urlparse(resp.headers["location"]).query)["state"][0]


def login(client: TestClient, code: str = "good-code"):
    state = state_from(start_login(client))
    return client.get(
        "/login/github/callback",
        params={"code": code, "state": state},
        follow_redirects=False,
    )
