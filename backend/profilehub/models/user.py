"""User model: identity, credentials, session counters and profile fields."""

from __future__ import annotations

import re
from typing import Any

from sqlalchemy import JSON, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, validates

from profilehub.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 254
LOCATION_MAX_LENGTH = 100

# local@domain.tld, no whitespace; full RFC 5322 parsing is not attempted.
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity plus the counters that drive session invalidation.

    Fields
    ------
    name : str
        Display name, 3 to 50 characters.
    email : str
        Login email. Unique and compared exactly as stored.
    password_hash : str
        bcrypt hash. Written only by :class:`~profilehub.repositories.user.UserRepository`.
    token_version : int
        Bumped on sign-out; refresh tokens carrying an older version are refused.
    refresh_token : str | None
        The single refresh token currently accepted for this user.
    bio, location, profile_picture, video_links
        Profile fields, independent of authentication.
    """

    __tablename__ = "users"

    # Columns
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    email: Mapped[str] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    token_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(LOCATION_MAX_LENGTH), nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(String(255), nullable=True)
    video_links: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_created_at", "created_at"),
    )

    @property
    def current_token_version(self) -> int:
        """Token version with an unset value read as ``0``."""
        return int(self.token_version or 0)

    # -------------------- Validators --------------------
    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        """
        Validate the display name length.

        :raises ValueError: If name is missing or outside 3..50 characters.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
            raise ValueError(
                f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters long."
            )
        return value

    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        """
        Validate email shape. The value is stored exactly as given.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        if len(value) > EMAIL_MAX_LENGTH or not EMAIL_RE.match(value):
            raise ValueError("Please enter a valid email address.")
        return value

    @validates("password_hash")
    def _validate_password_hash(self, key: str, value: str) -> str:
        if not value or not isinstance(value, str):
            raise ValueError("Password hash must be a non-empty string.")
        return value

    @validates("location")
    def _validate_location(self, key: str, value: str | None) -> str | None:
        if value is not None and len(value) > LOCATION_MAX_LENGTH:
            raise ValueError(f"Location must be at most {LOCATION_MAX_LENGTH} characters.")
        return value
