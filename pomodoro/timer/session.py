"""The in-progress history record ("pomodoro item") owned by the engine.

Lifecycle
---------
default_item()  blank, unsaved (id is None)
save()          on start from stopped; fills title + calendar keys
update()        every tick, on stop and at the end of every cycle
delete()        on reset; the record is discarded, not kept
"""

from __future__ import annotations

from typing import Callable

from ..database.history import HistoryItem, HistoryStore
from .time_utils import TimeInfo, time_utils as default_time_utils


class SessionRecord:

    def __init__(
        self,
        store: HistoryStore,
        time_utils: Callable[[], TimeInfo] = default_time_utils,
    ) -> None:
        self._store = store
        self._time_utils = time_utils
        self._item: HistoryItem = HistoryItem()
        self.default_item()

    @property
    def get(self) -> HistoryItem:
        return self._item

    def set(self, **values) -> None:
        for name, value in values.items():
            if not hasattr(self._item, name):
                raise AttributeError(f"HistoryItem has no field {name!r}")
            setattr(self._item, name, value)

    def snapshot(self) -> HistoryItem:
        """Detached copy handed to event listeners."""
        return self._item.copy()

    def save(self) -> HistoryItem:
        info = self._time_utils()
        item = self._item
        if not item.title:
            item.title = f"Started at {info.time}"
        item.day = info.day
        item.day_of_month = info.day_of_month
        item.week = info.week
        item.month = info.month
        item.year = info.year
        item.display_date = (
            f"{info.day_of_week}, {info.day_of_month} of "
            f"{info.month_of_year} of {info.year}"
        )
        item.timestamp = info.timestamp
        saved = self._store.save(item)
        if saved is not None:
            self._item = saved
        return self._item

    def update(self) -> HistoryItem:
        updated = self._store.update(self._item)
        if updated is not None:
            self._item = updated
        return self._item

    def delete(self) -> HistoryItem:
        if self._item.id:
            self._store.delete(self._item.id)
        self.default_item()
        return self._item

    def default_item(self) -> None:
        self._item = HistoryItem()
