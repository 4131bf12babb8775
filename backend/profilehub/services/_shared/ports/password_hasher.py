from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way password hashing.

    Implementations MUST raise :class:`~profilehub.services._shared.errors.HashError`
    when verification cannot run (e.g. a malformed stored hash) instead of
    returning ``False``.
    """

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, hashed: str) -> bool: ...
