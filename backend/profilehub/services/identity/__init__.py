"""Public user views shared by the auth and profile services."""

from .dto import UserPublicOut, VideoLinkOut

__all__ = ["UserPublicOut", "VideoLinkOut"]
