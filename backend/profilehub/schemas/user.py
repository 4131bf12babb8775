"""User and profile resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from profilehub.models.user import LOCATION_MAX_LENGTH
from profilehub.services._shared.policies.content import VIDEO_TITLE_MAX_LENGTH

PROFILE_PICTURE_URL = "/api/v1/users/{id}/profile-picture"


class VideoLinkSchema(Schema):
    """Embedded video link as exposed to clients."""

    id = fields.String(required=True)
    url = fields.String(required=True)
    title = fields.String(required=True)
    added_at = fields.String(data_key="addedAt")


class UserSchema(Schema):
    """Public representation of a user: never the hash nor the refresh token."""

    id = fields.UUID(required=True)
    name = fields.String(required=True)
    email = fields.String(required=True)
    bio = fields.String(allow_none=True)
    location = fields.String(allow_none=True)
    profile_picture_url = fields.Function(
        lambda user: PROFILE_PICTURE_URL.format(id=user.id), data_key="profilePictureUrl"
    )
    video_links = fields.List(fields.Nested(VideoLinkSchema), data_key="videoLinks")
    created_at = fields.DateTime(allow_none=True, data_key="createdAt")
    updated_at = fields.DateTime(allow_none=True, data_key="updatedAt")


class ProfileUpdateSchema(Schema):
    """Form or JSON fields accepted by ``PUT /users/profile/me``.

    Omitted fields are left untouched; ``bio``/``location`` accept ``""``.
    """

    class Meta:
        unknown = EXCLUDE

    name = fields.String(load_default=None)
    email = fields.String(load_default=None)
    bio = fields.String(load_default=None)
    location = fields.String(
        load_default=None, validate=validate.Length(max=LOCATION_MAX_LENGTH)
    )


class VideoLinkCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    url = fields.String(required=True)
    title = fields.String(required=True, validate=validate.Length(max=VIDEO_TITLE_MAX_LENGTH))


class VideoLinkAddedSchema(Schema):
    link = fields.Nested(VideoLinkSchema, required=True)
    user = fields.Nested(UserSchema, required=True)


class ContentItemSchema(Schema):
    """A video link flattened with its owner."""

    id = fields.Function(lambda item: item.link.id)
    url = fields.Function(lambda item: item.link.url)
    title = fields.Function(lambda item: item.link.title)
    added_at = fields.Function(lambda item: item.link.added_at, data_key="addedAt")
    user_id = fields.UUID(data_key="userId")
    user_name = fields.String(data_key="userName")
