"""Tests for the history table, its store and the session record."""

from datetime import datetime

import pytest
from sqlalchemy import inspect, text

from pomodoro.database.db import configure_engine, get_session, init_db
from pomodoro.database.history import HistoryItem, HistoryStore
from pomodoro.database.models import History
from pomodoro.timer.session import SessionRecord
from pomodoro.timer.time_utils import time_utils


@pytest.fixture
def history():
    return HistoryStore()


def _item(**values) -> HistoryItem:
    base = dict(title="Task", work_time=60, break_time=10, sessions=1,
                day=65, week=10, month=3, year=2024, timestamp=1000)
    base.update(values)
    return HistoryItem(**base)


# ═══════════════════════════════════════════════════════════════════════════
#  STORE
# ═══════════════════════════════════════════════════════════════════════════


class TestHistoryStore:

    def test_save_assigns_id(self, history):
        item = _item()
        saved = history.save(item)
        assert saved.id is not None
        assert item.id is None
        assert saved.title == "Task"

    def test_save_none(self, history):
        assert history.save(None) is None

    def test_update_persists_fields(self, history):
        saved = history.save(_item())
        saved.work_time = 120
        saved.sessions = 2
        history.update(saved)
        history.update(saved)
        [row] = history.get_by_id(saved.id)
        assert row.work_time == 120
        assert row.sessions == 2

    def test_update_without_id(self, history):
        assert history.update(_item()) is None
        assert history.update(None) is None

    def test_update_missing_row_returns_item(self, history, caplog):
        ghost = _item(id=999)
        assert history.update(ghost) is ghost
        assert "no longer exists" in caplog.text

    def test_delete(self, history):
        saved = history.save(_item())
        assert history.delete(saved.id) is None
        assert history.get_all() == []

    def test_delete_falsy_id(self, history):
        history.save(_item())
        history.delete(None)
        history.delete(0)
        assert len(history.get_all()) == 1

    def test_delete_all(self, history):
        for _ in range(3):
            history.save(_item())
        history.delete_all()
        assert history.get_all() == []

    def test_get_all_newest_first(self, history):
        history.save(_item(title="old", timestamp=100))
        history.save(_item(title="new", timestamp=200))
        history.save(_item(title="newer id", timestamp=200))
        assert [i.title for i in history.get_all()] == ["newer id", "new", "old"]

    def test_get_by_id_falsy(self, history):
        assert history.get_by_id(None) == []

    def test_get_by_day(self, history):
        history.save(_item(day=65, year=2024))
        history.save(_item(day=65, year=2023))
        history.save(_item(day=66, year=2024))
        assert len(history.get_by_day(65)) == 2
        assert len(history.get_by_day(65, 2024)) == 1

    def test_get_by_week_and_month(self, history):
        history.save(_item(week=10, month=3))
        history.save(_item(week=11, month=3))
        assert len(history.get_by_week(10, 2024)) == 1
        assert len(history.get_by_month(3, 2024)) == 2
        assert history.get_by_month(0) == []

    def test_totals(self, history):
        history.save(_item(work_time=60, break_time=10))
        history.save(_item(work_time=30, break_time=5))
        assert history.totals(history.get_all()) == (90, 15)

    def test_rows_are_plain_items(self, history):
        history.save(_item())
        with get_session() as db:
            assert db.query(History).count() == 1
        assert isinstance(history.get_all()[0], HistoryItem)


# ═══════════════════════════════════════════════════════════════════════════
#  MIGRATIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestMigrations:

    def test_adds_timestamp_to_old_table(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'old.db'}"
        configure_engine(url)
        with get_session() as db:
            db.execute(text(
                "CREATE TABLE history ("
                "id INTEGER PRIMARY KEY, title VARCHAR, description TEXT, "
                "work_time INTEGER, break_time INTEGER, sessions INTEGER, "
                "day INTEGER, day_of_month INTEGER, week INTEGER, "
                "month INTEGER, year INTEGER, display_date VARCHAR)"
            ))
            db.execute(text(
                "INSERT INTO history (title, work_time, break_time, sessions) "
                "VALUES ('legacy', 1500, 300, 1)"
            ))
        init_db()
        init_db()
        [row] = HistoryStore().get_all()
        assert row.title == "legacy"
        assert row.timestamp == 0

    def test_fresh_database_has_timestamp(self):
        from pomodoro.database import db as db_module
        columns = {c["name"] for c in inspect(db_module._get_engine()).get_columns("history")}
        assert "timestamp" in columns


# ═══════════════════════════════════════════════════════════════════════════
#  SESSION RECORD
# ═══════════════════════════════════════════════════════════════════════════


class TestSessionRecord:

    @pytest.fixture
    def record(self, history):
        return SessionRecord(history, lambda: time_utils(datetime(2024, 12, 31, 9, 30)))

    def test_starts_blank(self, record):
        assert record.get == HistoryItem()

    def test_set_unknown_field(self, record):
        with pytest.raises(AttributeError):
            record.set(colour="red")

    def test_save_fills_calendar(self, record):
        saved = record.save()
        assert saved.id is not None
        assert saved.title == "Started at 09:30"
        assert saved.display_date == "Tuesday, 31 of December of 2024"
        assert saved.day == 366
        assert saved.week == 1
        assert saved.year == 2024

    def test_save_keeps_given_title(self, record):
        record.set(title="Deep work")
        assert record.save().title == "Deep work"

    def test_update_and_delete(self, record, history):
        record.save()
        record.set(work_time=42)
        record.update()
        assert history.get_all()[0].work_time == 42
        record.delete()
        assert history.get_all() == []
        assert record.get.id is None

    def test_snapshot_is_detached(self, record):
        snap = record.snapshot()
        snap.title = "other"
        assert record.get.title == ""
