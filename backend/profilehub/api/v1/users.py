"""User listing and own-profile endpoints."""

from __future__ import annotations

from flask import Blueprint, request, send_file

from profilehub.api.deps import (
    current_user_id,
    json_response,
    parse_pagination,
    profile_service,
    require_auth,
    timing,
)
from profilehub.schemas import (
    ContentItemSchema,
    ProfileUpdateSchema,
    UserSchema,
    VideoLinkAddedSchema,
    VideoLinkCreateSchema,
    build_meta,
)
from profilehub.services.profile import PictureUpload, ProfileUpdateIn, VideoLinkIn

bp = Blueprint("users", __name__, url_prefix="/users")

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
content_list_schema = ContentItemSchema(many=True)
profile_update_schema = ProfileUpdateSchema()
video_link_create_schema = VideoLinkCreateSchema()
video_link_added_schema = VideoLinkAddedSchema()

PICTURE_FIELD = "profilePicture"


# --------------------------------------------------------------------------- #
# Public
# --------------------------------------------------------------------------- #


@bp.get("")
@timing
def list_users():
    """Return paginated public users, newest first."""
    pagination = parse_pagination()
    result = profile_service().list_users(page=pagination.page, limit=pagination.limit)
    return json_response(
        {"data": user_list_schema.dump(result.items), "meta": build_meta(result.meta)}
    )


@bp.get("/content")
@timing
def list_content():
    """Return every embedded video link with its owner, newest first."""
    pagination = parse_pagination()
    result = profile_service().list_content(page=pagination.page, limit=pagination.limit)
    return json_response(
        {"data": content_list_schema.dump(result.items), "meta": build_meta(result.meta)}
    )


@bp.get("/<user_id>")
@timing
def get_user(user_id: str):
    user = profile_service().get_user(user_id)
    return json_response({"data": user_schema.dump(user)})


@bp.get("/<user_id>/profile-picture")
@timing
def get_profile_picture(user_id: str):
    """Serve the user's picture, or the default picture."""
    path = profile_service().profile_picture_path(user_id)
    return send_file(path)


# --------------------------------------------------------------------------- #
# Own profile
# --------------------------------------------------------------------------- #


@bp.get("/profile/me")
@require_auth
@timing
def get_own_profile():
    user = profile_service().get_user(current_user_id())
    return json_response({"data": user_schema.dump(user)})


@bp.put("/profile/me")
@require_auth
@timing
def update_own_profile():
    """Update profile fields from JSON or multipart form data.

    A multipart request may carry the new picture under ``profilePicture``.
    """
    if request.mimetype == "multipart/form-data":
        raw = request.form.to_dict()
    else:
        raw = request.get_json(silent=True) or {}
    data = profile_update_schema.load(raw)

    picture = None
    upload = request.files.get(PICTURE_FIELD)
    if upload is not None and upload.filename:
        picture = PictureUpload(
            filename=upload.filename,
            content_type=upload.mimetype or "",
            data=upload.read(),
        )

    user = profile_service().update_profile(
        current_user_id(), ProfileUpdateIn(**data, picture=picture)
    )
    return json_response({"data": user_schema.dump(user)})


@bp.post("/profile/videos")
@require_auth
@timing
def add_video_link():
    data = video_link_create_schema.load(request.get_json(silent=True) or {})
    out = profile_service().add_video_link(current_user_id(), VideoLinkIn(**data))
    return json_response({"data": video_link_added_schema.dump(out)}, status=201)


@bp.delete("/profile/videos/<link_id>")
@require_auth
@timing
def remove_video_link(link_id: str):
    user = profile_service().remove_video_link(current_user_id(), link_id)
    return json_response({"data": user_schema.dump(user)})
