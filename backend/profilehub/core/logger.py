"""JSON log lines tagged with the id of the request that produced them."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
# Inbound headers honoured as the request id, first match wins.
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Every LogRecord has these; whatever else is on a record came from ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "request_id",
}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Fixed keys are ``time``, ``level``, ``name``, ``message`` and
    ``request_id``; ``extra`` fields are merged in next to them.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        entry.update(
            (attr, value)
            for attr, value in vars(record).items()
            if attr not in _STANDARD_ATTRS and not attr.startswith("_")
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """
    Id of the current request.

    Taken from the first inbound id header, else a fresh uuid4, and cached on
    ``g``. Outside a request a throwaway uuid4 is returned.
    """
    if not has_request_context():
        return str(uuid4())
    cached = g.get("request_id")
    if cached:
        return cached
    inbound = next((request.headers[h] for h in INBOUND_ID_HEADERS if request.headers.get(h)), None)
    g.request_id = inbound or str(uuid4())
    return g.request_id


def _resolve_level(level: str | int) -> int | str:
    if isinstance(level, int):
        return level
    named = logging.getLevelName(level.upper())
    return named if isinstance(named, int) else level.upper()


def configure_logging(level: str | int = "INFO") -> None:
    """Replace the root handlers with a single JSON handler on stdout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_resolve_level(level))


def init_app(app: Flask) -> None:
    """Assign a request id to every request and echo it on the response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        # the app context may outlive a request (test client), drop stale ids
        g.pop("request_id", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "JSONFormatter",
    "REQUEST_ID_HEADER",
    "RequestIdFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
]
