"""Session history widget listing saved timer runs.

A period selector switches between today, this week, this month and
everything.  Clicking a row title emits
``continue_requested(title, description)`` so the main window can start a
new run for the same task; the row button deletes that one record.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame, QComboBox,
    QPushButton, QSizePolicy,
)

from ..database.history import HistoryItem, HistoryStore
from ..timer.time_utils import time_utils

PERIODS = ("today", "week", "month", "all")
PERIOD_LABELS = {
    "today": "Today",
    "week": "This week",
    "month": "This month",
    "all": "All",
}


def format_duration(seconds: int) -> str:
    """Compact ``1h 5m`` / ``12m`` / ``40s`` rendering."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m"
    return f"{secs}s"


def load_period(store: HistoryStore, period: str) -> list[HistoryItem]:
    now = time_utils()
    if period == "today":
        return store.get_by_day(now.day, now.year)
    if period == "week":
        return store.get_by_week(now.week, now.year)
    if period == "month":
        return store.get_by_month(now.month, now.year)
    return store.get_all()


class SessionHistoryWidget(QWidget):
    """Displays saved runs for the selected period."""

    continue_requested = pyqtSignal(str, str)

    def __init__(self, store: HistoryStore, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._store = store
        self._items: list[HistoryItem] = []
        self._build_ui()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 0)
        layout.setSpacing(6)

        header_row = QHBoxLayout()
        header = QLabel("History")
        header.setStyleSheet("font-size: 13px; font-weight: 600;")
        header_row.addWidget(header)
        header_row.addStretch()

        self._period_combo = QComboBox(self)
        for period in PERIODS:
            self._period_combo.addItem(PERIOD_LABELS[period], period)
        self._period_combo.currentIndexChanged.connect(lambda _i: self.refresh())
        header_row.addWidget(self._period_combo)

        self._clear_btn = QPushButton("Clear", self)
        self._clear_btn.setToolTip("Delete every saved session")
        self._clear_btn.clicked.connect(self.clear_history)
        header_row.addWidget(self._clear_btn)
        layout.addLayout(header_row)

        self._totals_label = QLabel("")
        self._totals_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._totals_label)

        self._rows_container = QVBoxLayout()
        self._rows_container.setSpacing(4)
        layout.addLayout(self._rows_container)

        self._empty_label = QLabel("No sessions yet.")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._empty_label)

        self._row_widgets: list[QWidget] = []

    # ── refresh ───────────────────────────────────────────────────────

    @property
    def period(self) -> str:
        return self._period_combo.currentData()

    def set_period(self, period: str) -> None:
        self._period_combo.setCurrentIndex(self._period_combo.findData(period))

    @property
    def items(self) -> list[HistoryItem]:
        return list(self._items)

    def refresh(self, *_args) -> None:
        """Reload the selected period from the store."""
        # Rows stay parented until deleteLater; a row's own button may be
        # the caller.
        for w in self._row_widgets:
            self._rows_container.removeWidget(w)
            w.hide()
            w.deleteLater()
        self._row_widgets.clear()

        self._items = load_period(self._store, self.period)
        work, rest = self._store.totals(self._items)
        self._totals_label.setText(
            f"Work {format_duration(work)} · Break {format_duration(rest)}"
        )

        self._empty_label.setVisible(not self._items)
        for item in self._items:
            row = self._make_row(item)
            self._rows_container.addWidget(row)
            self._row_widgets.append(row)

    def clear_history(self) -> None:
        self._store.delete_all()
        self.refresh()

    def delete_item(self, item_id: int) -> None:
        self._store.delete(item_id)
        self.refresh()

    # ── row builder ───────────────────────────────────────────────────

    def _make_row(self, item: HistoryItem) -> QWidget:
        frame = QFrame(self)
        row = QHBoxLayout(frame)
        row.setContentsMargins(8, 4, 8, 4)
        row.setSpacing(8)

        title_lbl = QLabel(item.title or "Untitled session")
        title_lbl.setToolTip(item.description or item.display_date)
        title_lbl.setCursor(Qt.CursorShape.PointingHandCursor)
        title_lbl.setSizePolicy(
            QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred,
        )
        title_lbl.mousePressEvent = (
            lambda e, t=item.title, d=item.description:
            self.continue_requested.emit(t or "", d or "")
        )

        sessions_lbl = QLabel(f"{item.sessions}×")
        work_lbl = QLabel(format_duration(item.work_time))
        work_lbl.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        break_lbl = QLabel(format_duration(item.break_time))
        break_lbl.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)

        row.addWidget(title_lbl)
        row.addWidget(sessions_lbl)
        row.addWidget(work_lbl)
        row.addWidget(break_lbl)

        delete_btn = QPushButton("×", frame)
        delete_btn.setObjectName("deleteButton")
        delete_btn.setToolTip("Delete this session")
        delete_btn.setFixedWidth(24)
        delete_btn.clicked.connect(lambda _checked=False, i=item.id: self.delete_item(i))
        row.addWidget(delete_btn)
        return frame
