"""Persistence helpers shared by repositories (SQLAlchemy 2.x).

Repositories stay persistence-only: they build and run statements, they never
commit or roll back. Listing goes through two guards:

* ordering is resolved against an explicit ``public name -> column`` map, so a
  client-supplied sort key can never reach SQL unchecked;
* the primary key is always the last ``ORDER BY`` term, so page boundaries are
  stable even when the requested column has ties.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from profilehub.core.extensions import db

E = TypeVar("E")


@dataclass(slots=True)
class Pagination:
    """Requested window and ordering.

    :param page: 1-based page number.
    :param limit: Rows per page.
    :param sort: Sort keys, ``"-"`` prefix for descending (``["-created_at"]``).
    """

    page: int
    limit: int
    sort: list[str] = field(default_factory=list)

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * max(self.limit, 1)


@dataclass(slots=True)
class Page(Generic[E]):
    """One window of rows plus the unpaginated row count."""

    items: Sequence[E]
    total: int
    page: int
    limit: int


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Split ``["-created_at", "name"]`` into ``[("created_at", True), ("name", False)]``."""
    tokens: list[tuple[str, bool]] = []
    for item in raw:
        descending = item.startswith("-")
        name = item.lstrip("-").strip()
        if name:
            tokens.append((name, descending))
    return tokens


def order_clauses(
    columns: Mapping[str, InstrumentedAttribute[Any]],
    sort: Iterable[str],
    *,
    tiebreaker: InstrumentedAttribute[Any] | None = None,
) -> list[Any]:
    """Translate sort keys into ``ORDER BY`` terms; unknown keys are dropped."""
    clauses: list[Any] = []
    for name, descending in parse_sort_tokens(sort):
        column = columns.get(name)
        if column is not None:
            clauses.append(column.desc() if descending else column.asc())
    if tiebreaker is not None:
        clauses.append(tiebreaker.asc())
    return clauses


def paginate_select(session: Session, stmt: Select[Any], pagination: Pagination) -> tuple[list[Any], int]:
    """Run ``stmt`` for one page and count the full result.

    The count wraps ``stmt`` without its ordering.
    """
    total = session.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()
    rows = session.execute(
        stmt.limit(max(pagination.limit, 1)).offset(pagination.offset)
    ).scalars().all()
    return list(rows), int(total)


class BaseRepository(Generic[E]):
    """Single-model repository on top of a SQLAlchemy session.

    Subclasses set ``model`` and override the three hooks that describe what
    clients may sort by, the default order and which attributes an update may
    touch.

    :param session: Session owned by a Unit of Work. Defaults to the
        Flask-scoped ``db.session``.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    # hooks
    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _default_sort(self) -> list[str]:
        return []

    def _updatable_fields(self) -> set[str]:
        return set()

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    # reads
    def get(self, entity_id: Any) -> E | None:
        pk = self._pk_attr()
        if pk is None:
            raise RuntimeError(f"{type(self).__name__} has no primary key attribute")
        return cast(E | None, self.session.execute(select(self.model).where(pk == entity_id)).scalars().first())

    def paginate(self, pagination: Pagination) -> Page[E]:
        """List rows newest-first (or as requested) one page at a time."""
        stmt = select(self.model).order_by(
            *order_clauses(
                self._sortable_fields(),
                pagination.sort or self._default_sort(),
                tiebreaker=self._pk_attr(),
            )
        )
        items, total = paginate_select(self.session, stmt, pagination)
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)

    # writes
    def add(self, instance: E) -> E:
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any], *, flush: bool = True) -> E:
        """Set whitelisted attributes through ``setattr`` so ``@validates`` runs.

        :raises ValueError: A key outside ``_updatable_fields`` or a value a
            model validator refuses.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        for name, value in fields.items():
            setattr(instance, name, value)
        if flush:
            self.flush()
        return instance
