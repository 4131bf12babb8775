"""Profile component: listings, own-profile updates, embedded video links."""

from .dto import (
    ContentItemOut,
    ContentListOut,
    PageOut,
    PictureUpload,
    ProfileUpdateIn,
    UserListOut,
    VideoLinkAddedOut,
    VideoLinkIn,
)
from .service import ProfileService

__all__ = [
    "ContentItemOut",
    "ContentListOut",
    "PageOut",
    "PictureUpload",
    "ProfileService",
    "ProfileUpdateIn",
    "UserListOut",
    "VideoLinkAddedOut",
    "VideoLinkIn",
]
