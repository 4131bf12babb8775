# profilehub/infra/crypto/bcrypt_password_hasher.py
from __future__ import annotations

from dataclasses import dataclass

import bcrypt

from profilehub.services._shared.errors import HashError
from profilehub.services._shared.ports import PasswordHasher

# bcrypt only looks at the first 72 bytes; newer releases refuse longer input.
_BCRYPT_MAX_BYTES = 72


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]


@dataclass(frozen=True, slots=True)
class BcryptPasswordHasher(PasswordHasher):
    """
    Salted bcrypt hashing with a cost factor fixed at construction.

    :param rounds: bcrypt log2 cost (4–31).
    """

    rounds: int = 10

    def __post_init__(self) -> None:
        if not 4 <= self.rounds <= 31:
            raise ValueError(f"bcrypt rounds must be within 4..31, got {self.rounds}")

    def hash(self, plaintext: str) -> str:
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(plaintext), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Return whether ``plaintext`` matches ``hashed``.

        :raises HashError: If ``hashed`` is empty or not a bcrypt hash.
        """
        if not hashed:
            raise HashError("Stored password hash is empty")
        try:
            return bool(bcrypt.checkpw(_encode(plaintext or ""), hashed.encode("utf-8")))
        except ValueError as exc:
            raise HashError("Stored password hash is malformed") from exc
