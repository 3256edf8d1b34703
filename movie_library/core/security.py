from __future__ import annotations

import hashlib
import logging
import secrets
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from movie_library.core.errors import APIError
from movie_library.core.settings import Settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

Clock = Callable[[], datetime]

REFRESH_TOKEN_BYTES = 64


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def hash_password(password: str) -> str:
    logger.debug("Hashing password")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    is_valid = pwd_context.verify(plain_password, hashed_password)
    logger.debug("Password verification result=%s", is_valid)
    return is_valid


class AccessTokenIssuer:
    """Mints and verifies short-lived HMAC-signed bearer tokens.

    Access tokens are self-contained: they are never stored, and verification
    only checks signature, issuer, audience, expiry and token type.
    """

    token_type = "access"

    def __init__(self, settings: Settings, *, clock: Clock = utcnow) -> None:
        self._secret_key = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience
        self._lifetime = timedelta(minutes=settings.access_token_expire_minutes)
        self._clock = clock

    @property
    def expires_in_seconds(self) -> int:
        return int(self._lifetime.total_seconds())

    def issue(self, *, user_id: str, email: str) -> str:
        now = self._clock()
        expire = now + self._lifetime
        payload = {
            "sub": user_id,
            "email": email,
            "jti": str(uuid.uuid4()),
            "iss": self._issuer,
            "aud": self._audience,
            "type": self.token_type,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        logger.debug("Creating access token subject=%s expires_at=%s", user_id, expire.isoformat())
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, object]:
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
            )
        except JWTError as exc:
            logger.warning("Access token decode failed")
            raise APIError(status_code=401, code="invalid_token", message="Invalid or expired access token") from exc

        if payload.get("type") != self.token_type:
            logger.warning("Invalid token type in access token payload")
            raise APIError(status_code=401, code="invalid_token", message="Invalid token type")

        logger.debug("Access token decoded subject=%s", payload.get("sub"))
        return payload


def generate_refresh_token() -> str:
    logger.debug("Generating refresh token")
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()
