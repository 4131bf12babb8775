"""
DTOs for ProfileService.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from profilehub.services.identity.dto import UserPublicOut, VideoLinkOut

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PictureUpload:
    """
    Uploaded picture, detached from the web framework.

    :param filename: Client-side file name (only its extension is kept).
    :param content_type: Declared MIME type.
    :param data: Raw file bytes.
    """

    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """
    Input DTO for profile updates. ``None`` leaves a field unchanged.

    :param name: New display name.
    :type name: str | None
    :param email: New email; must not belong to another user.
    :type email: str | None
    :param bio: New bio; ``""`` clears it.
    :type bio: str | None
    :param location: New location; ``""`` clears it.
    :type location: str | None
    :param picture: Replacement profile picture.
    :type picture: PictureUpload | None
    """

    name: str | None = None
    email: str | None = None
    bio: str | None = None
    location: str | None = None
    picture: PictureUpload | None = None


@dataclass(frozen=True, slots=True)
class VideoLinkIn:
    url: str
    title: str


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PageOut:
    """
    Pagination metadata shared by listing DTOs.

    :param total: Total rows available.
    :param page: Current page (1-based).
    :param limit: Page size.
    """

    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass(frozen=True, slots=True)
class UserListOut:
    items: list[UserPublicOut]
    meta: PageOut


@dataclass(frozen=True, slots=True)
class ContentItemOut:
    """
    A video link together with its owner.

    :param link: The embedded link.
    :param user_id: Owner identifier.
    :param user_name: Owner display name.
    """

    link: VideoLinkOut
    user_id: UUID
    user_name: str


@dataclass(frozen=True, slots=True)
class ContentListOut:
    items: list[ContentItemOut]
    meta: PageOut


@dataclass(frozen=True, slots=True)
class VideoLinkAddedOut:
    link: VideoLinkOut
    user: UserPublicOut
