"""Profile management: public listings, own-profile updates and video links."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from profilehub.models.user import LOCATION_MAX_LENGTH, User
from profilehub.services._shared.base import BaseService, ServiceContext
from profilehub.services._shared.errors import ConflictError, NotFoundError, ValidationError
from profilehub.services._shared.policies.content import check_video_link
from profilehub.services._shared.policies.credentials import check_email, check_name
from profilehub.services._shared.ports import PictureStorage
from profilehub.services.identity.dto import UserPublicOut, VideoLinkOut
from profilehub.services.profile.dto import (
    ContentItemOut,
    ContentListOut,
    PageOut,
    ProfileUpdateIn,
    UserListOut,
    VideoLinkAddedOut,
    VideoLinkIn,
)

logger = logging.getLogger(__name__)


class ProfileService(BaseService):
    """
    Read and mutate the profile fields of :class:`User`.

    Authentication fields (password hash, token version, refresh token) are
    never touched here.

    :param storage: Where profile pictures are written.
    """

    def __init__(self, *, storage: PictureStorage, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.storage = storage

    # ------------------------------------------------------------------ #
    # Public reads
    # ------------------------------------------------------------------ #

    def list_users(self, *, page: int = 1, limit: int = 10) -> UserListOut:
        """Paginated public user list, newest first."""
        pagination = self.ensure_pagination(page=page, limit=limit)
        with self.ro_uow() as uow:
            result = uow.users.paginate(pagination)
            items = [UserPublicOut.from_model(u) for u in result.items]
        return UserListOut(
            items=items,
            meta=PageOut(total=result.total, page=result.page, limit=result.limit),
        )

    def get_user(self, user_id: Any) -> UserPublicOut:
        """
        :raises NotFoundError: Unknown or malformed id.
        """
        with self.ro_uow() as uow:
            return UserPublicOut.from_model(self._require_user(uow, user_id))

    def list_content(self, *, page: int = 1, limit: int = 10) -> ContentListOut:
        """Every video link across users with its owner, newest link first."""
        pagination = self.ensure_pagination(page=page, limit=limit)
        with self.ro_uow() as uow:
            items = [
                ContentItemOut(link=VideoLinkOut.from_raw(raw), user_id=user.id, user_name=user.name)
                for user in uow.users.list_with_video_links()
                for raw in (user.video_links or [])
            ]
        items.sort(key=lambda item: item.link.added_at, reverse=True)

        start = (pagination.page - 1) * pagination.limit
        return ContentListOut(
            items=items[start : start + pagination.limit],
            meta=PageOut(total=len(items), page=pagination.page, limit=pagination.limit),
        )

    def profile_picture_path(self, user_id: Any) -> Path:
        """
        Resolve the file to serve as ``user_id``'s picture.

        Falls back to the configured default picture.

        :raises NotFoundError: Unknown user, or no file to serve.
        """
        with self.ro_uow() as uow:
            stored = self._require_user(uow, user_id).profile_picture
        path = self.storage.open_path(stored)
        if path is None:
            raise NotFoundError("Profile picture", user_id)
        return path

    # ------------------------------------------------------------------ #
    # Own profile
    # ------------------------------------------------------------------ #

    def update_profile(self, user_id: Any, dto: ProfileUpdateIn) -> UserPublicOut:
        """
        Apply profile changes for the authenticated user.

        A new picture is written before the transaction and removed again if
        the transaction fails; the replaced picture is deleted only after a
        successful commit.

        :raises ValidationError: Malformed field or picture.
        :raises ConflictError: ``email`` belongs to another user.
        :raises NotFoundError: User vanished.
        """
        updates: dict[str, Any] = {}
        if dto.name:
            updates["name"] = check_name(dto.name)
        if dto.email:
            updates["email"] = check_email(dto.email)
        if dto.bio is not None:
            updates["bio"] = dto.bio
        if dto.location is not None:
            if len(dto.location) > LOCATION_MAX_LENGTH:
                raise ValidationError(
                    f"Location must be at most {LOCATION_MAX_LENGTH} characters"
                )
            updates["location"] = dto.location

        new_picture = self.storage.save(dto.picture) if dto.picture is not None else None
        old_picture: str | None = None
        try:
            with self.rw_uow() as uow:
                user = self._require_user(uow, user_id)
                email = updates.get("email")
                if email and email != user.email and uow.users.exists_by_email(email):
                    raise ConflictError("User", "Email already in use")
                if new_picture is not None:
                    old_picture = user.profile_picture
                    updates["profile_picture"] = new_picture
                uow.users.assign_updates(user, updates)
                out = UserPublicOut.from_model(user)
        except Exception:
            if new_picture is not None:
                self.storage.delete(new_picture)
            raise

        if old_picture:
            self.storage.delete(old_picture)
        logger.info("profile.updated", extra={"user_id": str(out.id), "fields": sorted(updates)})
        return out

    def add_video_link(self, user_id: Any, dto: VideoLinkIn) -> VideoLinkAddedOut:
        """
        Append a YouTube link to the user's profile.

        :raises ValidationError: Bad URL or title.
        """
        url, title = check_video_link(dto.url, dto.title)
        raw = {
            "id": uuid.uuid4().hex,
            "url": url,
            "title": title,
            "added_at": datetime.now(UTC).isoformat(),
        }
        with self.rw_uow() as uow:
            user = self._require_user(uow, user_id)
            # JSON columns track reassignment, not in-place mutation.
            uow.users.assign_updates(user, {"video_links": [*(user.video_links or []), raw]})
            out = VideoLinkAddedOut(link=VideoLinkOut.from_raw(raw), user=UserPublicOut.from_model(user))

        logger.info("profile.video_added", extra={"user_id": str(out.user.id), "link_id": raw["id"]})
        return out

    def remove_video_link(self, user_id: Any, link_id: str) -> UserPublicOut:
        """
        :raises NotFoundError: No link with ``link_id`` on this profile.
        """
        with self.rw_uow() as uow:
            user = self._require_user(uow, user_id)
            current = list(user.video_links or [])
            remaining = [link for link in current if link.get("id") != link_id]
            if len(remaining) == len(current):
                raise NotFoundError("Video link", link_id, message="YouTube link not found")
            uow.users.assign_updates(user, {"video_links": remaining})
            out = UserPublicOut.from_model(user)

        logger.info("profile.video_removed", extra={"user_id": str(out.id), "link_id": link_id})
        return out

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _require_user(uow, user_id: Any) -> User:
        user = uow.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id, message="User not found")
        return user
