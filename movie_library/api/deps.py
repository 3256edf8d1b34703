from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from movie_library.core.errors import APIError
from movie_library.core.security import AccessTokenIssuer
from movie_library.core.settings import get_settings
from movie_library.db.session import get_db
from movie_library.models import User
from movie_library.services.token_lifecycle import RefreshTokenManager

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{get_settings().api_prefix}/auth/login")


@lru_cache
def get_access_token_issuer() -> AccessTokenIssuer:
    return AccessTokenIssuer(get_settings())


def get_token_manager(
    db: Session = Depends(get_db),
    access_tokens: AccessTokenIssuer = Depends(get_access_token_issuer),
) -> RefreshTokenManager:
    return RefreshTokenManager(db, settings=get_settings(), access_tokens=access_tokens)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    access_tokens: AccessTokenIssuer = Depends(get_access_token_issuer),
) -> User:
    logger.debug("Resolving current user from access token")
    payload = access_tokens.decode(token)
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        logger.warning("Token subject is invalid")
        raise APIError(status_code=401, code="invalid_token", message="Token payload is invalid")

    user = db.get(User, subject)
    if user is None:
        logger.warning("Token user_id=%s not found", subject)
        raise APIError(status_code=401, code="invalid_token", message="Token user was not found")

    logger.debug("Resolved current user user_id=%s", user.id)
    return user
