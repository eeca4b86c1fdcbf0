"""Shared pytest fixtures."""

import pytest

from marketplace.logging.context import clear_log_context
from marketplace.persistence import close_database, get_session, init_database


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer .env values out of the tests."""
    for name in ("DATABASE_URL", "LOG_LEVEL", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def database():
    """Fresh in-memory database for one test."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def session(database):
    """Session on the in-memory database, committed when the test ends."""
    with get_session() as session:
        yield session


@pytest.fixture
def google_claims():
    """Google OpenID Connect userinfo claims."""
    return {
        "sub": "110169484474386276334",
        "name": "Ana Martin",
        "given_name": "Ana",
        "email": "ana.martin@example.com",
        "email_verified": True,
        "picture": "https://lh3.googleusercontent.com/a/ana.png",
    }


@pytest.fixture
def facebook_claims():
    """Facebook Graph API /me response."""
    return {
        "id": "10224587412345678",
        "name": "Louis Bernard",
        "email": "louis.bernard@example.com",
        "picture": {
            "data": {
                "height": 50,
                "is_silhouette": False,
                "url": "https://platform-lookaside.fbsbx.com/louis.jpg",
                "width": 50,
            }
        },
    }
