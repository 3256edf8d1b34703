from __future__ import annotations

from enum import Enum


class AuthErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    BAD_CREDENTIALS = "bad_credentials"


class RotationErrorKind(str, Enum):
    INVALID = "invalid"
    EXPIRED = "expired"
    REUSE_DETECTED = "reuse_detected"


class AuthError(Exception):
    def __init__(self, kind: AuthErrorKind) -> None:
        self.kind = kind
        super().__init__(kind.value)


class RotationError(Exception):
    """A refresh value could not be exchanged; the client must log in again."""

    def __init__(self, kind: RotationErrorKind, *, user_id: str | None = None) -> None:
        self.kind = kind
        self.user_id = user_id
        super().__init__(kind.value)


class StoreFailure(Exception):
    """The refresh token store could not complete an operation."""
