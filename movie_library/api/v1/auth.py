from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from movie_library.api.deps import get_current_user, get_token_manager
from movie_library.core.errors import APIError, success_response
from movie_library.core.rate_limit import auth_limiter, client_key, enforce_auth_rate_limit
from movie_library.core.settings import get_settings
from movie_library.db.session import get_db
from movie_library.models import User
from movie_library.schemas.auth import AccessTokenResponse, LoginRequest, RegisterRequest, TokenPair, UserPublic
from movie_library.services import auth_service
from movie_library.services.auth_errors import AuthError, RotationError, RotationErrorKind, StoreFailure
from movie_library.services.token_lifecycle import RefreshTokenManager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _set_refresh_cookie(response: JSONResponse, refresh_token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.refresh_cookie_name,
        refresh_token,
        max_age=settings.refresh_token_expire_days * 86400,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
    )


def _clear_refresh_cookie(response: JSONResponse) -> None:
    settings = get_settings()
    response.delete_cookie(
        settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
    )


def _token_response(tokens: TokenPair) -> JSONResponse:
    body = AccessTokenResponse(
        access_token=tokens.access_token,
        token_type=tokens.token_type,
        expires_in=tokens.expires_in,
    )
    response = success_response(body.model_dump(mode="json"))
    _set_refresh_cookie(response, tokens.refresh_token)
    return response


@router.post("/register", dependencies=[Depends(enforce_auth_rate_limit)])
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    logger.info("Auth register endpoint hit")
    user = auth_service.register_user(db, payload)
    return success_response(UserPublic.model_validate(user).model_dump(mode="json"), status_code=status.HTTP_201_CREATED)


@router.post("/login", dependencies=[Depends(enforce_auth_rate_limit)])
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    tokens: RefreshTokenManager = Depends(get_token_manager),
):
    logger.info("Auth login endpoint hit")
    try:
        _, pair = auth_service.login(db, payload, tokens=tokens)
    except AuthError as exc:
        logger.info("Login rejected reason=%s", exc.kind.value)
        raise APIError(status_code=401, code="invalid_credentials", message="Invalid email or password") from exc
    except StoreFailure as exc:
        raise APIError(status_code=503, code="store_unavailable", message="Session store is unavailable") from exc
    auth_limiter.reset(client_key(request))
    return _token_response(pair)


@router.post("/refresh", dependencies=[Depends(enforce_auth_rate_limit)])
def refresh(request: Request, tokens: RefreshTokenManager = Depends(get_token_manager)):
    logger.info("Auth refresh endpoint hit")
    refresh_token = request.cookies.get(get_settings().refresh_cookie_name)
    if not refresh_token:
        raise APIError(status_code=401, code="missing_refresh_token", message="Refresh token missing")

    try:
        _, pair = auth_service.refresh_session(tokens, refresh_token)
    except RotationError as exc:
        if exc.kind is RotationErrorKind.REUSE_DETECTED:
            logger.warning("Refresh rejected: reuse detected user_id=%s", exc.user_id)
        else:
            logger.info("Refresh rejected reason=%s", exc.kind.value)
        raise APIError(
            status_code=401,
            code="invalid_refresh_token",
            message="Refresh token is invalid or expired",
        ) from exc
    except StoreFailure as exc:
        raise APIError(status_code=503, code="store_unavailable", message="Session store is unavailable") from exc
    return _token_response(pair)


@router.post("/logout")
def logout(request: Request, tokens: RefreshTokenManager = Depends(get_token_manager)):
    logger.info("Auth logout endpoint hit")
    auth_service.logout(tokens, request.cookies.get(get_settings().refresh_cookie_name))
    response = success_response({"ok": True})
    _clear_refresh_cookie(response)
    return response


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return success_response(UserPublic.model_validate(current_user).model_dump(mode="json"))
