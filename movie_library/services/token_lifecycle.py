from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from movie_library.core.logging import get_security_logger
from movie_library.core.security import AccessTokenIssuer, Clock, ensure_utc, generate_refresh_token, hash_token, utcnow
from movie_library.core.settings import Settings
from movie_library.models import RefreshToken, User
from movie_library.services.auth_errors import RotationError, RotationErrorKind, StoreFailure
from movie_library.services.refresh_token_store import RefreshTokenStore

logger = logging.getLogger(__name__)
security_logger = get_security_logger()


class RefreshTokenState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    ROTATED = "rotated"
    REVOKED = "revoked"


def token_state(record: RefreshToken, now: datetime) -> RefreshTokenState:
    if record.revoked_at is not None:
        if record.replaced_by_token_hash is not None:
            return RefreshTokenState.ROTATED
        return RefreshTokenState.REVOKED
    if now >= ensure_utc(record.expires_at):
        return RefreshTokenState.EXPIRED
    return RefreshTokenState.ACTIVE


@dataclass(frozen=True)
class IssuedRefreshToken:
    value: str
    record: RefreshToken


@dataclass(frozen=True)
class RotationResult:
    user: User
    access_token: str
    refresh_token: IssuedRefreshToken


class RefreshTokenManager:
    """Issues, rotates and revokes refresh tokens for one database session.

    Every successful rotation revokes the presented token and links it to its
    successor, so each login produces a single append-only chain. Presenting a
    token that is already revoked is reported as reuse; with
    ``refresh_reuse_revokes_chain`` enabled the rest of that chain is revoked
    as well, which logs out whoever holds the current head.
    """

    def __init__(
        self,
        db: Session,
        *,
        settings: Settings,
        access_tokens: AccessTokenIssuer,
        clock: Clock = utcnow,
    ) -> None:
        self.db = db
        self.store = RefreshTokenStore(db)
        self.access_tokens = access_tokens
        self.lifetime = timedelta(days=settings.refresh_token_expire_days)
        self.revoke_chain_on_reuse = settings.refresh_reuse_revokes_chain
        self._clock = clock

    def _new_token(self, user_id: str, now: datetime) -> IssuedRefreshToken:
        raw_value = generate_refresh_token()
        record = RefreshToken(
            user_id=user_id,
            token_hash=hash_token(raw_value),
            issued_at=now,
            expires_at=now + self.lifetime,
        )
        return IssuedRefreshToken(value=raw_value, record=record)

    def issue(self, user_id: str) -> IssuedRefreshToken:
        issued = self._new_token(user_id, self._clock())
        try:
            self.store.insert(issued.record)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Refresh token issue failed user_id=%s", user_id)
            raise StoreFailure("refresh token could not be stored") from exc
        logger.info("Refresh token issued token_id=%s user_id=%s", issued.record.id, user_id)
        return issued

    def rotate(self, raw_value: str) -> RotationResult:
        now = self._clock()
        try:
            record = self.store.find_by_value(raw_value)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreFailure("refresh token lookup failed") from exc

        if record is None:
            logger.info("Refresh rejected: unknown token")
            raise RotationError(RotationErrorKind.INVALID)

        state = token_state(record, now)
        if state in (RefreshTokenState.ROTATED, RefreshTokenState.REVOKED):
            self._handle_reuse(record, now)
            raise RotationError(RotationErrorKind.REUSE_DETECTED, user_id=record.user_id)
        if state is RefreshTokenState.EXPIRED:
            logger.info("Refresh rejected: expired token_id=%s user_id=%s", record.id, record.user_id)
            raise RotationError(RotationErrorKind.EXPIRED, user_id=record.user_id)

        user = self.db.get(User, record.user_id)
        if user is None:
            logger.warning("Refresh rejected: owner missing token_id=%s user_id=%s", record.id, record.user_id)
            raise RotationError(RotationErrorKind.INVALID)

        successor = self._new_token(record.user_id, now)
        try:
            won = self.store.update_if_unrevoked(
                record.id,
                revoked_at=now,
                replaced_by_token_hash=successor.record.token_hash,
            )
            if won:
                self.store.insert(successor.record)
                self.db.commit()
            else:
                self.db.rollback()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Refresh rotation failed token_id=%s user_id=%s", record.id, record.user_id)
            raise StoreFailure("refresh token rotation failed") from exc

        if not won:
            # Another request rotated or revoked this token between our read and our update.
            self._handle_reuse(record, now)
            raise RotationError(RotationErrorKind.REUSE_DETECTED, user_id=record.user_id)

        access_token = self.access_tokens.issue(user_id=user.id, email=user.email)
        logger.info(
            "Refresh token rotated token_id=%s successor_id=%s user_id=%s",
            record.id,
            successor.record.id,
            user.id,
        )
        return RotationResult(user=user, access_token=access_token, refresh_token=successor)

    def revoke(self, raw_value: str) -> None:
        now = self._clock()
        try:
            record = self.store.find_by_value(raw_value)
            if record is None:
                logger.debug("Revoke ignored: unknown token")
                return
            if record.revoked_at is not None:
                logger.debug("Revoke ignored: token_id=%s already revoked", record.id)
                return
            self.store.update_if_unrevoked(record.id, revoked_at=now)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            security_logger.exception("Refresh token revocation failed")
            return
        logger.info("Refresh token revoked token_id=%s user_id=%s", record.id, record.user_id)

    def _handle_reuse(self, record: RefreshToken, now: datetime) -> None:
        security_logger.warning(
            "Refresh token reuse detected token_id=%s user_id=%s cascade=%s",
            record.id,
            record.user_id,
            self.revoke_chain_on_reuse,
        )
        if not self.revoke_chain_on_reuse:
            return
        try:
            revoked = self.store.revoke_chain_from(record, revoked_at=now)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreFailure("refresh token chain revocation failed") from exc
        security_logger.warning(
            "Revoked %s refresh token(s) in chain of token_id=%s user_id=%s",
            revoked,
            record.id,
            record.user_id,
        )
