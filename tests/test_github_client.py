from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from pairhub.auth.github import API_BASE_URL, TOKEN_URL, GitHubOAuthClient, GitHubProfile
from pairhub.services.exceptions import UpstreamError

USER_PAYLOAD = {
    "login": "octocat",
    "node_id": "MDQ6VXNlcjU4MzIzMQ==",
    "name": "The Octocat",
    "bio": None,
    "avatar_url": "https://avatars.githubusercontent.com/u/583231?v=4",
    "html_url": "https://github.com/octocat",
    "email": "octocat@github.com",
}


def _client(handler) -> GitHubOAuthClient:
    return GitHubOAuthClient(
        client_id="cid",
        client_secret="csecret",
        callback_url="http://localhost:3000/login/github/callback",
        transport=httpx.MockTransport(handler),
    )


def test_authorize_url():
    client = _client(lambda request: httpx.Response(500))
    query = parse_qs(urlparse(client.authorize_url("xyz")).query)

    assert query == {
        "client_id": ["cid"],
        "redirect_uri": ["http://localhost:3000/login/github/callback"],
        "scope": ["user:email"],
        "state": ["xyz"],
    }


@pytest.mark.asyncio
async def test_authenticate_exchanges_code_then_reads_profile():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if str(request.url) == TOKEN_URL:
            form = parse_qs(request.content.decode())
            assert form["code"] == ["abc"]
            assert form["client_secret"] == ["csecret"]
            return httpx.Response(200, json={"access_token": "gho_token", "token_type": "bearer"})
        if str(request.url) == f"{API_BASE_URL}/user":
            assert request.headers["Authorization"] == "Bearer gho_token"
            return httpx.Response(200, json=USER_PAYLOAD)
        return httpx.Response(404)

    profile = await _client(handler).authenticate("abc")

    assert [r.method for r in seen] == ["POST", "GET"]
    assert profile.node_id == "MDQ6VXNlcjU4MzIzMQ=="
    assert profile.username == "octocat"
    assert profile.display_name == "The Octocat"
    assert profile.profile_url == "https://github.com/octocat"
    assert profile.primary_email == "octocat@github.com"


@pytest.mark.asyncio
async def test_rejected_code_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "bad_verification_code"})

    with pytest.raises(UpstreamError) as exc:
        await _client(handler).exchange_code("stale")
    assert exc.value.message == "bad_verification_code"


@pytest.mark.asyncio
async def test_profile_http_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Bad credentials"})

    with pytest.raises(UpstreamError):
        await _client(handler).fetch_profile("revoked")


@pytest.mark.asyncio
async def test_network_error_raises_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(UpstreamError) as exc:
        await _client(handler).exchange_code("abc")
    assert exc.value.code == "github_unavailable"


def test_profile_without_email():
    profile = GitHubProfile.from_api({**USER_PAYLOAD, "email": None})
    assert profile.emails == []
    assert profile.primary_email is None


def test_profile_without_node_id_is_rejected():
    with pytest.raises(UpstreamError):
        GitHubProfile.from_api({"login": "octocat"})
