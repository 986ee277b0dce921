"""History store: the persistence contract the timer engine consumes.

The engine only ever calls ``save`` / ``update`` / ``delete``.  The
query helpers back the history view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict, fields, replace

from .db import get_session
from .models import History

logger = logging.getLogger(__name__)


@dataclass
class HistoryItem:
    """Plain, detached copy of a ``history`` row."""

    id: int | None = None
    title: str = ""
    description: str = ""
    work_time: int = 0
    break_time: int = 0
    sessions: int = 0
    day: int = 0
    day_of_month: int = 0
    week: int = 0
    month: int = 0
    year: int = 0
    display_date: str = ""
    timestamp: int = 0

    def copy(self) -> "HistoryItem":
        return replace(self)

    def as_dict(self) -> dict:
        return asdict(self)


_COLUMNS = tuple(f.name for f in fields(HistoryItem) if f.name != "id")


def _to_item(row: History) -> HistoryItem:
    return HistoryItem(id=row.id, **{name: getattr(row, name) for name in _COLUMNS})


class HistoryStore:
    """Save, update, delete and query history rows."""

    def save(self, item: HistoryItem | None) -> HistoryItem | None:
        """Insert *item* and return a copy carrying the new id."""
        if item is None:
            return None
        with get_session() as db:
            row = History(**{name: getattr(item, name) for name in _COLUMNS})
            db.add(row)
            db.flush()
            saved = _to_item(row)
        logger.debug("Saved history item %s", saved.id)
        return saved

    def update(self, item: HistoryItem | None) -> HistoryItem | None:
        """Write every field of *item* to its row.  Safe to repeat."""
        if item is None or item.id is None:
            return None
        with get_session() as db:
            row = db.get(History, item.id)
            if row is None:
                logger.warning("History item %s no longer exists", item.id)
                return item
            for name in _COLUMNS:
                setattr(row, name, getattr(item, name))
        return item

    def delete(self, item_id: int | None) -> None:
        if not item_id:
            return None
        with get_session() as db:
            row = db.get(History, item_id)
            if row is not None:
                db.delete(row)
        logger.debug("Deleted history item %s", item_id)
        return None

    def delete_all(self) -> None:
        with get_session() as db:
            db.query(History).delete()

    # ── queries ───────────────────────────────────────────────────────

    def get_all(self) -> list[HistoryItem]:
        return self._query()

    def get_by_id(self, item_id: int | None) -> list[HistoryItem]:
        if not item_id:
            return []
        return self._query(History.id == item_id)

    def get_by_day(self, day: int, year: int | None = None) -> list[HistoryItem]:
        if not day:
            return []
        return self._query(History.day == day, *self._year_filter(year))

    def get_by_week(self, week: int, year: int | None = None) -> list[HistoryItem]:
        if not week:
            return []
        return self._query(History.week == week, *self._year_filter(year))

    def get_by_month(self, month: int, year: int | None = None) -> list[HistoryItem]:
        if not month:
            return []
        return self._query(History.month == month, *self._year_filter(year))

    @staticmethod
    def totals(items: list[HistoryItem]) -> tuple[int, int]:
        """Summed ``(work_time, break_time)`` in seconds."""
        return (
            sum(i.work_time for i in items),
            sum(i.break_time for i in items),
        )

    # ── internal ──────────────────────────────────────────────────────

    @staticmethod
    def _year_filter(year: int | None) -> tuple:
        return (History.year == year,) if year else ()

    def _query(self, *criteria) -> list[HistoryItem]:
        with get_session() as db:
            rows = (
                db.query(History)
                .filter(*criteria)
                .order_by(History.timestamp.desc(), History.id.desc())
                .all()
            )
            return [_to_item(r) for r in rows]
