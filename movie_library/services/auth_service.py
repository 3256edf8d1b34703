from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from movie_library.core.errors import APIError
from movie_library.core.security import hash_password, pwd_context, verify_password
from movie_library.models import User
from movie_library.schemas.auth import LoginRequest, RegisterRequest, TokenPair
from movie_library.services.auth_errors import AuthError, AuthErrorKind
from movie_library.services.token_lifecycle import RefreshTokenManager

logger = logging.getLogger(__name__)


def register_user(db: Session, payload: RegisterRequest) -> User:
    existing_user = db.scalar(select(User).where(User.email == payload.email))
    if existing_user is not None:
        raise APIError(status_code=409, code="email_taken", message="Email is already registered")

    user = User(
        email=payload.email,
        username=payload.username or payload.email,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise APIError(status_code=409, code="email_taken", message="Email is already registered") from exc
    db.refresh(user)
    logger.info("User registered user_id=%s", user.id)
    return user


def verify_credentials(db: Session, email: str, password: str) -> User:
    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        # Burn a hash so unknown emails take as long as wrong passwords.
        pwd_context.dummy_verify()
        raise AuthError(AuthErrorKind.NOT_FOUND)
    if not verify_password(password, user.password_hash):
        raise AuthError(AuthErrorKind.BAD_CREDENTIALS)
    return user


def _token_pair(tokens: RefreshTokenManager, *, access_token: str, refresh_token: str) -> TokenPair:
    return TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=tokens.access_tokens.expires_in_seconds,
    )


def login(db: Session, payload: LoginRequest, *, tokens: RefreshTokenManager) -> tuple[User, TokenPair]:
    user = verify_credentials(db, payload.email, payload.password)
    access_token = tokens.access_tokens.issue(user_id=user.id, email=user.email)
    issued = tokens.issue(user.id)
    logger.info("User logged in user_id=%s", user.id)
    return user, _token_pair(tokens, access_token=access_token, refresh_token=issued.value)


def refresh_session(tokens: RefreshTokenManager, refresh_token: str) -> tuple[User, TokenPair]:
    result = tokens.rotate(refresh_token)
    return result.user, _token_pair(
        tokens,
        access_token=result.access_token,
        refresh_token=result.refresh_token.value,
    )


def logout(tokens: RefreshTokenManager, refresh_token: str | None) -> None:
    if not refresh_token:
        logger.debug("Logout without refresh token")
        return
    tokens.revoke(refresh_token)
