"""
Public user DTOs.

Data Transfer Objects isolate the service layer from ORM models: a
``UserPublicOut`` never carries the password hash or the live refresh token.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass(frozen=True, slots=True)
class VideoLinkOut:
    """
    Embedded video link owned by a user.

    :param id: Hex identifier of the link.
    :param url: YouTube URL.
    :param title: Display title.
    :param added_at: ISO-8601 timestamp string.
    """

    id: str
    url: str
    title: str
    added_at: str

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> VideoLinkOut:
        return cls(
            id=str(raw.get("id", "")),
            url=str(raw.get("url", "")),
            title=str(raw.get("title", "")),
            added_at=str(raw.get("added_at", "")),
        )


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Output DTO representing public-safe user data.

    :param id: User identifier.
    :type id: UUID
    :param name: Display name.
    :type name: str
    :param email: Email address.
    :type email: str
    :param profile_picture: Relative storage path of the picture, if any.
    :type profile_picture: str | None
    """

    id: UUID
    name: str
    email: str
    bio: str | None = None
    location: str | None = None
    profile_picture: str | None = None
    video_links: tuple[VideoLinkOut, ...] = field(default_factory=tuple)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, user: Any) -> UserPublicOut:
        """Build the view from a ``User`` row; reads only public columns."""
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            bio=user.bio,
            location=user.location,
            profile_picture=user.profile_picture,
            video_links=tuple(VideoLinkOut.from_raw(v) for v in (user.video_links or [])),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
