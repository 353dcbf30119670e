from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

# Ensure settings are in place before app import
os.environ["STORE_BACKEND"] = "inmemory"
os.environ["ENV"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GITHUB_CLIENT_ID"] = "test-client-id"
os.environ["GITHUB_CLIENT_SECRET"] = "test-client-secret"
os.environ["SESSION_SECRET"] = "test_session_secret"
os.environ.pop("GITHUB_CALLBACK_URL", None)
os.environ.pop("SLACK_TOKEN", None)
os.environ.pop("SLACK_TEAM", None)

from pairhub.auth.login import get_github_client  # noqa: E402
from pairhub.main import app  # noqa: E402
from pairhub.repositories import InMemorySessionStore, InMemoryUserRepository  # noqa: E402
from pairhub.repositories.factory import get_session_store, get_user_repository  # noqa: E402
from tests.helpers import FakeGitHubClient  # noqa: E402


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def github() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def client(users, session_store, github) -> TestClient:
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_github_client] = lambda: github
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
