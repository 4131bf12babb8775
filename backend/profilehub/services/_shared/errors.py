"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. Each class carries a ``status_code`` / ``code`` classification that
the boundary (``profilehub/core/errors.py``) maps to a Problem Details
response without ever inspecting the message text.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str, *, column: str | None = None) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name in the message; SQLite reports the
    offending ``table.column`` instead, hence the optional ``column`` fallback.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').
    column : str | None
        Qualified column (e.g., ``"users.email"``) to match as a fallback.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else str(exc).lower()
    if constraint_name.lower() in message:
        return True
    return column is not None and column.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors, but they carry the classification the
      boundary needs (``status_code`` and ``code``).
    - Anything that is not a ``ServiceError`` is treated as unexpected (500).
    """

    status_code: int = 400
    code: str = "bad_request"
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Malformed or missing input."""

    status_code = 400
    code = "validation_error"
    default_message = "Invalid input"


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: object
    """

    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, key: object = None, message: str | None = None) -> None:
        self.entity = entity
        self.key = key
        super().__init__(message or f"{entity} not found")


class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    status_code = 409
    code = "conflict"

    def __init__(self, entity: str, detail: str) -> None:
        self.entity = entity
        self.detail = detail
        super().__init__(detail)


class DuplicateEmailError(ConflictError):
    """Store-level unique violation on ``users.email``."""

    def __init__(self, detail: str = "User already exists") -> None:
        super().__init__("User", detail)


# --------------------------------------------------------------------------- #
# Authentication (401)
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Credentials were presented but cannot be accepted."""

    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class InvalidCredentialsError(AuthenticationError):
    code = "invalid_credentials"
    default_message = "Invalid password"


class InvalidTokenError(AuthenticationError):
    code = "invalid_token"
    default_message = "Invalid token"


class InvalidOrExpiredTokenError(AuthenticationError):
    code = "invalid_or_expired_token"
    default_message = "Invalid or expired refresh token"


class ExpiredTokenError(AuthenticationError):
    code = "token_expired"
    default_message = "Token has expired"


class RevokedTokenError(AuthenticationError):
    code = "token_revoked"
    default_message = "Token has been revoked"


class VersionMismatchError(AuthenticationError):
    code = "token_version_mismatch"
    default_message = "Token version mismatch. Please sign in again."


# --------------------------------------------------------------------------- #
# Infrastructure (500)
# --------------------------------------------------------------------------- #


class TransientStoreError(ServiceError):
    """The credential store timed out or was unreachable; safe to retry."""

    status_code = 500
    code = "transient_store_error"
    default_message = "Storage temporarily unavailable"


class HashError(ServiceError):
    """Password verification could not run (malformed hash, misconfiguration)."""

    status_code = 500
    code = "hash_error"
    default_message = "Password hash could not be processed"
