from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims carried by an access or refresh token.

    :ivar user_id: Identity of the token owner.
    :ivar token_type: ``"access"`` or ``"refresh"``.
    :ivar issued_at: Issue time (epoch seconds).
    :ivar expires_at: Expiry time (epoch seconds).
    :ivar version: Token-version snapshot (refresh tokens only).
    :ivar jti: Unique token identifier, when present.
    """

    user_id: UUID
    token_type: str
    issued_at: int
    expires_at: int
    version: int | None = None
    jti: str | None = None

    @property
    def expires_at_dt(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at, tz=UTC)


class TokenProvider(Protocol):
    """Port for issuing and decoding signed, time-bounded tokens."""

    def issue_access_token(self, user_id: UUID | str) -> str: ...

    def issue_refresh_token(self, user_id: UUID | str, token_version: int) -> str: ...

    def decode_access_token(self, token: str) -> TokenClaims: ...

    def decode_refresh_token(self, token: str) -> TokenClaims: ...

    def peek_expiry(self, token: str) -> int | None: ...
