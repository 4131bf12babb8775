"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, g, request

from profilehub.api.deps import (
    auth_service,
    current_user_id,
    json_response,
    optional_auth,
    profile_service,
    require_auth,
    timing,
)
from profilehub.core.extensions import limiter
from profilehub.schemas import (
    AccessTokenSchema,
    AuthSessionSchema,
    RefreshSchema,
    SignInSchema,
    SignUpSchema,
    UserSchema,
)
from profilehub.services.auth import RefreshIn, SignInIn, SignOutIn, SignUpIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

sign_up_schema = SignUpSchema()
sign_in_schema = SignInSchema()
refresh_schema = RefreshSchema()
session_schema = AuthSessionSchema()
access_token_schema = AccessTokenSchema()
user_schema = UserSchema()


def _signin_rate_limit() -> str:
    return str(current_app.config.get("AUTH_SIGNIN_RATE_LIMIT", "10 per minute"))


@bp.post("/signup")
@timing
def sign_up():
    """Register a user and open a session for it."""
    data = sign_up_schema.load(request.get_json(silent=True) or {})
    session = auth_service().sign_up(SignUpIn(**data))
    return json_response({"data": session_schema.dump(session)}, status=201)


@bp.post("/signin")
@limiter.limit(_signin_rate_limit)
@timing
def sign_in():
    """Authenticate credentials and issue a fresh token pair."""
    data = sign_in_schema.load(request.get_json(silent=True) or {})
    session = auth_service().sign_in(SignInIn(**data))
    return json_response({"data": session_schema.dump(session)})


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new access token."""
    data = refresh_schema.load(request.get_json(silent=True) or {})
    out = auth_service().refresh_access_token(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": access_token_schema.dump(out)})


@bp.post("/signout")
@optional_auth
@timing
def sign_out():
    """End the caller's session; always succeeds."""
    auth_service().sign_out(
        SignOutIn(access_token=g.access_token, user_id=g.current_user_id)
    )
    return json_response({"data": {"message": "User signed out successfully"}})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user."""
    user = profile_service().get_user(current_user_id())
    return json_response({"data": user_schema.dump(user)})
