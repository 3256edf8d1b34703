from __future__ import annotations

import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("JWT_SECRET_KEY", "test-signing-key-0123456789abcdefghijklmnop")
os.environ.setdefault("REFRESH_COOKIE_SECURE", "false")

import movie_library.db.session as db_session
from movie_library.core.rate_limit import auth_limiter
from movie_library.core.security import AccessTokenIssuer, hash_password
from movie_library.core.settings import get_settings
from movie_library.main import app
from movie_library.models import User
from movie_library.services.token_lifecycle import RefreshTokenManager


class FakeClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def database(tmp_path):
    database_path = tmp_path / "test.db"
    db_session.configure_engine(f"sqlite:///{database_path}")
    db_session.init_db()
    yield


@pytest.fixture()
def client(database):
    auth_limiter.reset()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db(database):
    session = db_session.open_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def settings():
    return get_settings()


@pytest.fixture()
def make_manager(settings, clock):
    def factory(session, **overrides):
        active_settings = settings.model_copy(update=overrides) if overrides else settings
        return RefreshTokenManager(
            session,
            settings=active_settings,
            access_tokens=AccessTokenIssuer(active_settings),
            clock=clock,
        )

    return factory


@pytest.fixture()
def user(db):
    row = User(email="alice@example.com", username="alice", password_hash=hash_password("password123"))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
