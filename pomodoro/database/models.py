"""SQLAlchemy ORM models for Pomodoro."""

from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class History(Base):
    """One timer run: accumulated work/break seconds plus calendar keys.

    The calendar columns are captured once, when the run is first saved,
    and are what the history view groups by (today / week / month).
    """

    __tablename__ = "history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    work_time = Column(Integer, nullable=False, default=0)       # seconds
    break_time = Column(Integer, nullable=False, default=0)      # seconds
    sessions = Column(Integer, nullable=False, default=0)
    day = Column(Integer, nullable=False, default=0)             # day of year
    day_of_month = Column(Integer, nullable=False, default=0)
    week = Column(Integer, nullable=False, default=0)            # ISO week
    month = Column(Integer, nullable=False, default=0)
    year = Column(Integer, nullable=False, default=0)
    display_date = Column(String(128), nullable=False, default="")
    timestamp = Column(Integer, nullable=False, default=0)       # unix seconds

    def __repr__(self) -> str:
        return (
            f"<History id={self.id} title={self.title!r} "
            f"work={self.work_time}s break={self.break_time}s "
            f"sessions={self.sessions}>"
        )
