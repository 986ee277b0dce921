"""Database connection, schema upgrades and session management.

The history database lives next to the settings file unless
``POMODORO_DATABASE_URL`` points somewhere else.  Tests call
``configure_engine("sqlite:///:memory:")`` before ``init_db()``.
"""

import logging
import os
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / ".config" / "Pomodoro"
DB_PATH = APP_SUPPORT_DIR / "pomodoro.db"

# Columns added after the first release: (table, column, DDL type).
ADDED_COLUMNS = (
    ("history", "timestamp", "INTEGER NOT NULL DEFAULT 0"),
)

_engine: Engine | None = None
_SessionFactory = None


def _default_url() -> str:
    url = os.environ.get("POMODORO_DATABASE_URL")
    if url:
        return url
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{DB_PATH}"


def _make_engine(url: str) -> Engine:
    logger.debug("Opening database %s", url)
    return create_engine(url, connect_args={"check_same_thread": False})


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _make_engine(_default_url())
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


def configure_engine(url: str) -> None:
    """Point the app (or a test) at another database URL."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = _make_engine(url)
    _SessionFactory = None


def _add_missing_columns(engine: Engine) -> None:
    """Bring tables created by older versions up to the current model."""
    insp = inspect(engine)
    tables = set(insp.get_table_names())
    with engine.begin() as conn:
        for table, column, ddl in ADDED_COLUMNS:
            if table not in tables:
                continue
            existing = {c["name"] for c in insp.get_columns(table)}
            if column in existing:
                continue
            logger.info("Upgrading %s: adding column %s", table, column)
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))


def init_db() -> None:
    """Create missing tables and columns."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    _add_missing_columns(engine)


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    session: OrmSession = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
