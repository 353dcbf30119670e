from __future__ import annotations

import asyncio
from dataclasses import replace

from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry
from structlog.testing import capture_logs

from pairhub.core.config import settings
from pairhub.main import create_app
from pairhub.models import User
from tests.helpers import login


def test_index_for_anonymous_visitor(client: TestClient):
    resp = client.get("/")
    assert resp.status_code == 200
    html = resp.text
    assert 'href="/login/github"' in html
    assert 'content="Find remote pair programming partners"' in html
    assert '<meta name="twitter:site" content="@pairhub">' in html
    assert "data-posts" in html
    assert 'class="sidebar"' in html
    assert "data-welcome-modal" not in html
    assert "data-profile-area" not in html


def test_index_passes_search_phrase_to_posts(client: TestClient):
    resp = client.get("/", params={"s": "rust"})
    assert 'data-search="rust"' in resp.text
    assert "Posts matching" in resp.text


def test_welcome_query_opens_modal_and_normalizes_url(client: TestClient):
    login(client)

    resp = client.get("/?welcome")
    assert resp.status_code == 200
    assert "data-welcome-modal" in resp.text
    assert "Welcome to PairHub, The Octocat!" in resp.text
    assert "/static/js/welcome.js" in resp.text

    script = client.get("/static/js/welcome.js")
    assert script.status_code == 200
    assert 'replaceState(null, "", "/")' in script.text


def test_welcome_modal_needs_bare_flag(client: TestClient):
    login(client)

    assert "data-welcome-modal" not in client.get("/").text
    assert "data-welcome-modal" not in client.get("/?welcome=1").text


def test_following_the_callback_shows_welcome_once(client: TestClient):
    first = login(client)
    landing = client.get(first.headers["location"])
    assert "data-welcome-modal" in landing.text

    client.get("/logout", follow_redirects=False)
    second = login(client)
    assert second.headers["location"] == "/"
    assert "data-welcome-modal" not in client.get(second.headers["location"]).text


def test_profile_area_for_logged_in_user(client: TestClient):
    login(client)

    html = client.get("/").text
    assert "data-profile-area" in html
    assert 'src="https://avatars.githubusercontent.com/u/octocat"' in html
    assert 'href="/@octocat"' in html
    assert 'href="/logout"' in html
    assert "data-dropdown hidden" in html
    assert "/static/js/profile_area.js" in html
    assert 'href="/login/github"' not in html


def test_profile_area_script_manages_outside_click_listener(client: TestClient):
    script = client.get("/static/js/profile_area.js").text
    assert 'document.addEventListener("mousedown", handleClick, false)' in script
    assert 'document.removeEventListener("mousedown", handleClick, false)' in script
    assert "root.contains(event.target)" in script
    assert "event.persisted" in script


def test_profile_page_by_handle(client: TestClient, users):
    asyncio.run(users.insert(User(user_id="U_1", username="ada", name="Ada L.", bio="Engines")))

    resp = client.get("/@ada")
    assert resp.status_code == 200
    assert "Ada L." in resp.text
    assert "Engines" in resp.text

    legacy = client.get("/profile", params={"username": "ada"})
    assert legacy.status_code == 200
    assert "Ada L." in legacy.text


def test_unknown_profile_is_404(client: TestClient):
    resp = client.get("/@nobody")
    assert resp.status_code == 404
    assert "no user named nobody" in resp.text


def test_html_pages_carry_security_headers(client: TestClient):
    resp = client.get("/", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "Content-Security-Policy" in resp.headers
    assert "Strict-Transport-Security" not in resp.headers


def test_health(client: TestClient):
    assert client.get("/health").json() == {"status": "ok"}


def test_missing_client_id_disables_login():
    with capture_logs() as logs:
        disabled = create_app(replace(settings, github_client_id=None), registry=CollectorRegistry())

    assert any(
        entry["event"] == "github_login_disabled" and entry["log_level"] == "warning"
        for entry in logs
    )

    client = TestClient(disabled)
    assert client.get("/login/github", follow_redirects=False).status_code == 404
    assert client.get("/login/github/callback", follow_redirects=False).status_code == 404

    home = client.get("/")
    assert home.status_code == 200
    assert 'href="/login/github"' not in home.text


def test_pages_render_without_session_secret_when_login_is_off():
    config = replace(settings, github_client_id=None, env="production", session_secret="")
    client = TestClient(create_app(config, registry=CollectorRegistry()))

    resp = client.get("/", headers={"Cookie": "pairhub.sid=left-over"})
    assert resp.status_code == 200
    assert 'href="/login/github"' not in resp.text
    assert client.get("/api/me", headers={"Cookie": "pairhub.sid=left-over"}).status_code == 401


def test_missing_session_secret_in_production_disables_login():
    config = replace(settings, env="production", session_secret="")
    with capture_logs() as logs:
        app = create_app(config, registry=CollectorRegistry())

    assert any(
        entry["event"] == "github_login_disabled" and "SESSION_SECRET" in entry["detail"]
        for entry in logs
    )

    client = TestClient(app)
    assert client.get("/login/github", follow_redirects=False).status_code == 404
    assert client.get("/").status_code == 200
