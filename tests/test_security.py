from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from movie_library.core.errors import APIError
from movie_library.core.security import AccessTokenIssuer, utcnow
from movie_library.core.settings import Settings


def test_access_token_carries_identity_claims(settings):
    issuer = AccessTokenIssuer(settings)

    token = issuer.issue(user_id="user-1", email="alice@example.com")
    claims = issuer.decode(token)

    assert claims["sub"] == "user-1"
    assert claims["email"] == "alice@example.com"
    assert claims["iss"] == settings.jwt_issuer
    assert claims["aud"] == settings.jwt_audience
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60


def test_access_tokens_get_unique_ids(settings):
    issuer = AccessTokenIssuer(settings)

    first = issuer.decode(issuer.issue(user_id="user-1", email="alice@example.com"))
    second = issuer.decode(issuer.issue(user_id="user-1", email="alice@example.com"))

    assert first["jti"] != second["jti"]


def test_expired_access_token_is_rejected(settings):
    issuer = AccessTokenIssuer(settings, clock=lambda: utcnow() - timedelta(hours=1))
    token = issuer.issue(user_id="user-1", email="alice@example.com")

    with pytest.raises(APIError) as exc:
        AccessTokenIssuer(settings).decode(token)
    assert exc.value.code == "invalid_token"


def test_token_from_other_audience_or_key_is_rejected(settings):
    other_audience = AccessTokenIssuer(settings.model_copy(update={"jwt_audience": "someone-else"}))
    other_key = AccessTokenIssuer(settings.model_copy(update={"jwt_secret_key": "x" * 40}))
    issuer = AccessTokenIssuer(settings)

    for foreign in (other_audience, other_key):
        with pytest.raises(APIError):
            issuer.decode(foreign.issue(user_id="user-1", email="alice@example.com"))


def test_settings_require_strong_signing_key():
    with pytest.raises(ValidationError):
        Settings(jwt_secret_key="too-short")

    with pytest.raises(ValidationError):
        Settings(jwt_secret_key="k" * 40, jwt_algorithm="RS256")

    with pytest.raises(ValidationError):
        Settings(jwt_secret_key="k" * 40, refresh_token_expire_days=0)
