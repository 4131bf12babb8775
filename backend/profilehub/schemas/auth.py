"""Authentication-related Marshmallow schemas.

Input schemas only check presence and type; the credential rules (email
shape, password length, name length) live in the service layer so every
caller gets the same messages.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields

from .user import UserSchema


class SignUpSchema(Schema):
    """Input payload for account registration."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True)
    email = fields.String(required=True)
    password = fields.String(required=True)


class SignInSchema(Schema):
    """Input payload for authenticating a user."""

    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True)
    password = fields.String(required=True)


class RefreshSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, data_key="refreshToken")


class AuthSessionSchema(Schema):
    """Response payload with a token pair and the public user."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    user = fields.Nested(UserSchema, required=True)


class AccessTokenSchema(Schema):
    access_token = fields.String(required=True, data_key="accessToken")
