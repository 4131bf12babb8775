"""Repository package exposing persistence-layer access for the domain models."""

from __future__ import annotations

from profilehub.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    paginate_select,
)
from profilehub.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    "UserRepository",
]
