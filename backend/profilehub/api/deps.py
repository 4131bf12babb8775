"""Shared API helpers for request parsing, auth guards and service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from profilehub.core.logger import ensure_request_id
from profilehub.core.security import get_auth_components
from profilehub.infra.storage import LocalPictureStorage
from profilehub.schemas.common import PaginationQuerySchema
from profilehub.services._shared.base import ServiceContext
from profilehub.services._shared.errors import AuthenticationError
from profilehub.services.auth.service import AuthService
from profilehub.services.profile.service import ProfileService

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


@dataclass(slots=True)
class Pagination:
    """Container holding pagination arguments parsed from the request."""

    page: int
    limit: int


def parse_pagination(default_limit: int = 10, max_limit: int = 100) -> Pagination:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""
    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return Pagination(page=data["page"], limit=data["limit"])


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Auth guards
# --------------------------------------------------------------------------- #


def bearer_token() -> str | None:
    """Return the token from ``Authorization: Bearer <token>``, if any."""
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def require_auth(func: F) -> F:
    """Reject the request unless it carries a valid, non-revoked access token.

    On success ``g.current_user_id`` and ``g.access_token`` are set; the user
    row itself is not loaded.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        if token is None:
            raise AuthenticationError("Authorization token missing")
        claims = get_auth_components().verifier.verify_access_token(token)
        g.access_token = token
        g.current_user_id = str(claims.user_id)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(func: F) -> F:
    """Like :func:`require_auth` but never rejects.

    ``g.access_token`` holds whatever bearer token was sent; ``g.current_user_id``
    is set only when that token verifies.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        g.access_token = token
        g.current_user_id = None
        if token is not None:
            try:
                claims = get_auth_components().verifier.verify_access_token(token)
            except AuthenticationError as exc:
                current_app.logger.debug("auth.optional_rejected", extra={"reason": exc.code})
            else:
                g.current_user_id = str(claims.user_id)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> str:
    user_id = getattr(g, "current_user_id", None)
    if user_id is None:
        raise AuthenticationError()
    return user_id


# --------------------------------------------------------------------------- #
# Service builders
# --------------------------------------------------------------------------- #


def service_context() -> ServiceContext:
    return ServiceContext(
        actor_id=getattr(g, "current_user_id", None),
        request_id=ensure_request_id(),
    )


def auth_service() -> AuthService:
    components = get_auth_components()
    return AuthService(
        password_hasher=components.password_hasher,
        token_provider=components.token_provider,
        revocations=components.revocations,
        verifier=components.verifier,
        ctx=service_context(),
    )


def picture_storage() -> LocalPictureStorage:
    return LocalPictureStorage(
        current_app.config["UPLOAD_FOLDER"],
        max_bytes=int(current_app.config.get("MAX_PICTURE_BYTES", 2 * 1024 * 1024)),
        default_picture=current_app.config.get("DEFAULT_PROFILE_PICTURE"),
    )


def profile_service() -> ProfileService:
    return ProfileService(storage=picture_storage(), ctx=service_context())
