"""Query and envelope schemas shared by list endpoints."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate


class PaginationQuerySchema(Schema):
    """``?page=&limit=``; ``limit`` defaults per endpoint and is capped at ``max_limit``."""

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))

    def __init__(self, *, default_limit: int = 10, max_limit: int = 100, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.default_limit = default_limit
        self.max_limit = max_limit

    @post_load
    def _clamp(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["limit"] = min(data.get("limit", self.default_limit), self.max_limit)
        return data


class MetaSchema(Schema):
    """``meta`` block next to ``data`` in list responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total_pages = fields.Integer(required=True, data_key="totalPages")
    has_next = fields.Boolean(required=True, data_key="hasNext")
    has_prev = fields.Boolean(required=True, data_key="hasPrev")


_meta_schema = MetaSchema()


def build_meta(page: Any) -> dict[str, Any]:
    """Dump any object exposing ``total``, ``page``, ``limit`` and the derived flags."""
    return _meta_schema.dump(page)
