from __future__ import annotations

import hashlib
import math
import time
from typing import cast

import redis  # type: ignore[import-untyped]

from profilehub.services._shared.ports import RevocationRegistry


class RedisRevocationRegistry(RevocationRegistry):
    """
    Shared revocation registry for **access tokens** backed by Redis.

    Each entry is a small marker whose TTL ends with the token's own expiry,
    so Redis evicts it natively. Keys hash the token to keep them short.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "revoked:at:"):
        self.r = r
        self.prefix = prefix

    def _k(self, token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"{self.prefix}{digest}"

    def is_revoked(self, token: str) -> bool:
        return cast(int, self.r.exists(self._k(token))) == 1

    def revoke(self, token: str, expires_at: float) -> None:
        ttl = math.ceil(expires_at - time.time())
        if ttl <= 0:
            # Token is already past its expiry; nothing worth storing.
            return
        # store a small marker with TTL; idempotent
        self.r.set(self._k(token), "1", ex=ttl)
