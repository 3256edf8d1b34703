from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from movie_library.core.security import hash_token
from movie_library.models import RefreshToken

logger = logging.getLogger(__name__)


class RefreshTokenStore:
    """Persistence boundary for refresh token records.

    Records are only ever inserted or transitioned through
    :meth:`update_if_unrevoked`; nothing here deletes rows. The store does not
    commit: the caller owns the transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def insert(self, record: RefreshToken) -> RefreshToken:
        self.db.add(record)
        self.db.flush()
        logger.debug("Inserted refresh token id=%s user_id=%s", record.id, record.user_id)
        return record

    def find_by_hash(self, token_hash: str) -> RefreshToken | None:
        return self.db.scalar(select(RefreshToken).where(RefreshToken.token_hash == token_hash))

    def find_by_value(self, raw_value: str) -> RefreshToken | None:
        return self.find_by_hash(hash_token(raw_value))

    def update_if_unrevoked(
        self,
        token_id: int,
        *,
        revoked_at: datetime,
        replaced_by_token_hash: str | None = None,
    ) -> bool:
        """Revoke a record only if nobody revoked it first.

        Returns ``False`` when the row was already revoked, which is how a
        concurrent rotation of the same token shows up.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=revoked_at, replaced_by_token_hash=replaced_by_token_hash)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        updated = result.rowcount == 1
        logger.debug("Conditional revoke token_id=%s updated=%s", token_id, updated)
        return updated

    def chain_from(self, record: RefreshToken) -> list[RefreshToken]:
        """Follow successor links starting at ``record`` (inclusive)."""
        chain = [record]
        seen = {record.token_hash}
        successor_hash = record.replaced_by_token_hash
        while successor_hash is not None and successor_hash not in seen:
            successor = self.find_by_hash(successor_hash)
            if successor is None:
                break
            chain.append(successor)
            seen.add(successor_hash)
            successor_hash = successor.replaced_by_token_hash
        return chain

    def revoke_chain_from(self, record: RefreshToken, *, revoked_at: datetime) -> int:
        revoked = 0
        for member in self.chain_from(record):
            if member.revoked_at is None and self.update_if_unrevoked(member.id, revoked_at=revoked_at):
                revoked += 1
        return revoked
