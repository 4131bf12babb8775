"""
profilehub.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that define the contracts for
credential hashing, token management and access-token revocation.

These ports decouple the service layer from concrete implementations.

Modules
-------
- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: one-way hash and verify.

- :mod:`token_provider`:
    Defines :class:`~.TokenProvider` and :class:`~.TokenClaims`: signed token
    issuing and decoding.

- :mod:`revocation_registry`:
    Defines :class:`~.RevocationRegistry` and the process-local
    :class:`~.InMemoryRevocationRegistry`.

- :mod:`picture_storage`:
    Defines :class:`~.PictureStorage` for profile picture files.

Concrete adapters (bcrypt, PyJWT, Redis, local files) live under ``profilehub.infra``.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .picture_storage import PictureStorage
from .revocation_registry import InMemoryRevocationRegistry, RevocationRegistry
from .token_provider import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenClaims,
    TokenProvider,
)

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "InMemoryRevocationRegistry",
    "PasswordHasher",
    "PictureStorage",
    "RevocationRegistry",
    "TokenClaims",
    "TokenProvider",
]
