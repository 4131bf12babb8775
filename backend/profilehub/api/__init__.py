"""HTTP surface: one blueprint set per API version."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join_prefix(*parts: str) -> str:
    return "/" + "/".join(p.strip("/") for p in parts if p.strip("/"))


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` under ``base_prefix``.

    An empty relative prefix mounts at ``base_prefix`` itself.
    """
    for blueprint, relative in entries:
        app.register_blueprint(blueprint, url_prefix=_join_prefix(base_prefix, relative))


def init_app(app: Flask) -> None:
    """Mount v1 under ``API_BASE_PREFIX`` (``/api`` by default)."""
    from profilehub.api import v1

    root = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(app, base_prefix=_join_prefix(root, v1.API_VERSION), entries=v1.REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
