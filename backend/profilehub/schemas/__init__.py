"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AccessTokenSchema, AuthSessionSchema, RefreshSchema, SignInSchema, SignUpSchema
from .common import MetaSchema, PaginationQuerySchema, build_meta
from .user import (
    ContentItemSchema,
    ProfileUpdateSchema,
    UserSchema,
    VideoLinkAddedSchema,
    VideoLinkCreateSchema,
    VideoLinkSchema,
)

__all__ = [
    "AccessTokenSchema",
    "AuthSessionSchema",
    "RefreshSchema",
    "SignInSchema",
    "SignUpSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "build_meta",
    "ContentItemSchema",
    "ProfileUpdateSchema",
    "UserSchema",
    "VideoLinkAddedSchema",
    "VideoLinkCreateSchema",
    "VideoLinkSchema",
]
