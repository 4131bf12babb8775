"""Liveness plus a database round-trip."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from profilehub.api.deps import json_response, timing
from profilehub.core.extensions import db

bp = Blueprint("health", __name__)


def _database_ok() -> bool:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("health.db_unreachable")
        return False
    return True


@bp.get("/health")
@timing
def healthcheck():
    """200 when the database answers, 503 (``degraded``) when it does not."""
    healthy = _database_ok()
    return json_response(
        {
            "status": "ok" if healthy else "degraded",
            "db": "ok" if healthy else "fail",
            "version": current_app.config.get("APP_VERSION", "dev"),
        },
        status=200 if healthy else 503,
    )
