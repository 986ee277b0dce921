"""Database package."""

from .db import get_session, init_db
from .models import History
from .history import HistoryItem, HistoryStore

__all__ = ["get_session", "init_db", "History", "HistoryItem", "HistoryStore"]
