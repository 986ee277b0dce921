"""Calendar keys captured when a session record is first saved."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimeInfo:
    day: int            # day of year, 1-366
    day_of_month: int
    week: int           # ISO week number
    month: int          # 1-12
    year: int
    day_of_week: str    # "Monday"
    month_of_year: str  # "January"
    time: str           # "14:05"
    timestamp: int      # unix seconds


def time_utils(now: datetime | None = None) -> TimeInfo:
    now = now or datetime.now()
    return TimeInfo(
        day=now.timetuple().tm_yday,
        day_of_month=now.day,
        week=now.isocalendar()[1],
        month=now.month,
        year=now.year,
        day_of_week=now.strftime("%A"),
        month_of_year=now.strftime("%B"),
        time=now.strftime("%H:%M"),
        timestamp=int(now.timestamp()),
    )
