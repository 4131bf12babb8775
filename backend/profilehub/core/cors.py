"""Cross-origin access for browser clients of ``/api``."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from profilehub.core.logger import REQUEST_ID_HEADER


def parse_origins(raw: str | None) -> list[str] | str:
    """``"a, b"`` -> ``["a", "b"]``; blank or ``"*"`` -> ``"*"``."""
    origins = [item.strip() for item in (raw or "").split(",") if item.strip()]
    return "*" if not origins or origins == ["*"] else origins


def init_app(app: Flask) -> None:
    """Enable CORS on ``/api/*`` from ``CORS_ORIGINS``.

    Credentials are only allowed for an explicit origin list.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        supports_credentials=origins != "*",
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
