from __future__ import annotations

import heapq
import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class RevocationRegistry(Protocol):
    """
    Abstraction for access tokens rejected before their natural expiry.

    Entries only need to live until the token's own ``exp``: past that point
    the token is refused by signature/expiry checks anyway. Methods are
    expected to be idempotent.
    """

    def revoke(self, token: str, expires_at: float) -> None: ...

    def is_revoked(self, token: str) -> bool: ...


class InMemoryRevocationRegistry(RevocationRegistry):
    """
    Process-local registry keyed by the raw token string.

    Expired entries are dropped lazily on every call and eagerly by a single
    daemon timer armed for the earliest pending expiry. State is neither
    durable nor shared between processes.

    :param clock: Epoch-seconds clock; defaults to :func:`time.time`.
    :param auto_purge: Arm the background timer (disable in unit tests that
        drive the clock by hand).
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] | None = None,
        auto_purge: bool = True,
    ) -> None:
        self._clock = clock
        self._auto_purge = auto_purge
        self._entries: dict[str, float] = {}
        self._heap: list[tuple[float, str]] = []
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._timer_due: float | None = None

    # ------------------------- helpers -------------------------

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.time()

    def _purge_locked(self, now: float) -> int:
        removed = 0
        while self._heap and self._heap[0][0] <= now:
            due, token = heapq.heappop(self._heap)
            # A re-revoke may have pushed a later expiry for the same token.
            if self._entries.get(token) == due:
                del self._entries[token]
                removed += 1
        return removed

    def _arm_timer_locked(self) -> None:
        if not self._auto_purge or not self._heap:
            return
        due = self._heap[0][0]
        if self._timer is not None and self._timer_due is not None and self._timer_due <= due:
            return
        if self._timer is not None:
            self._timer.cancel()
        delay = max(0.0, due - self._now())
        timer = threading.Timer(delay, self._on_timer)
        timer.daemon = True
        self._timer = timer
        self._timer_due = due
        timer.start()

    def _on_timer(self) -> None:
        with self._lock:
            self._timer = None
            self._timer_due = None
            removed = self._purge_locked(self._now())
            self._arm_timer_locked()
        if removed:
            logger.debug("revocation.purged", extra={"count": removed})

    # -------------------------- API ----------------------------

    def revoke(self, token: str, expires_at: float) -> None:
        with self._lock:
            now = self._now()
            self._purge_locked(now)
            if expires_at <= now:
                # Already unusable; nothing to remember.
                return
            current = self._entries.get(token)
            if current is not None and current >= expires_at:
                return
            self._entries[token] = expires_at
            heapq.heappush(self._heap, (expires_at, token))
            self._arm_timer_locked()

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            self._purge_locked(self._now())
            return token in self._entries

    def purge_expired(self) -> int:
        """Drop expired entries now and return how many were removed."""
        with self._lock:
            return self._purge_locked(self._now())

    def close(self) -> None:
        """Cancel the background timer (used on app teardown and in tests)."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._timer_due = None

    def __len__(self) -> int:
        with self._lock:
            self._purge_locked(self._now())
            return len(self._entries)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.is_revoked(token)
