"""Main timer display widget.

Layout (top → bottom):
    - Technique selector (Pomodoro / Flowtime, only while stopped)
    - Title + description inputs for the record about to be saved
    - Time display and phase label
    - Control row: Reset, Start/Pause, Skip, Stop
    - Session counter
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QLineEdit, QComboBox, QFrame,
)

from ..timer.engine import TimerEngine, TimerEvent, TimerEventPayload, TimerState
from ..timer.techniques import TechniqueKind, WORK_STAGE


TECHNIQUE_LABELS: dict[TechniqueKind, str] = {
    TechniqueKind.POMODORO: "Pomodoro",
    TechniqueKind.FLOWTIME: "Flowtime",
}

START_LABELS: dict[TimerState, str] = {
    TimerState.STOPPED: "Start",
    TimerState.RUNNING: "Pause",
    TimerState.PAUSED:  "Resume",
}


def phase_label(engine: TimerEngine) -> str:
    """Human label for what the counter is doing right now."""
    if engine.state is TimerState.STOPPED:
        return "READY"
    data = engine.get_timer_data()
    if engine.technique_kind is TechniqueKind.FLOWTIME:
        working = data.timer_stage == WORK_STAGE
    else:
        working = data.current_time > 0
    label = "WORK TIME" if working else "BREAK TIME"
    if engine.state is TimerState.PAUSED:
        return f"{label} (PAUSED)"
    return label


class TimerWidget(QWidget):
    """The timer card: display plus controls."""

    technique_changed = pyqtSignal(object)

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._build_ui()
        self._connect_signals()
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(24, 16, 24, 20)
        layout.setSpacing(10)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._technique_combo = QComboBox(card)
        for kind, text in TECHNIQUE_LABELS.items():
            self._technique_combo.addItem(text, kind)
        self._technique_combo.setCurrentIndex(
            self._technique_combo.findData(self._engine.technique_kind)
        )
        layout.addWidget(self._technique_combo)

        self._title_input = QLineEdit(card)
        self._title_input.setPlaceholderText("Title (optional)")
        self._title_input.setMaxLength(255)
        layout.addWidget(self._title_input)

        self._description_input = QLineEdit(card)
        self._description_input.setPlaceholderText("Description (optional)")
        layout.addWidget(self._description_input)

        self._phase_label = QLabel("READY", card)
        self._phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._phase_label)

        self._time_label = QLabel("00:00:00", card)
        self._time_label.setObjectName("timeLabel")
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_label.setStyleSheet("font-size: 56px; font-weight: 600;")
        layout.addWidget(self._time_label)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(10)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._reset_btn = QPushButton("Reset", card)
        self._reset_btn.setToolTip("Stop and discard this session")
        self._start_pause_btn = QPushButton("Start", card)
        self._start_pause_btn.setObjectName("primaryButton")
        self._skip_btn = QPushButton("Skip", card)
        self._stop_btn = QPushButton("Stop", card)
        self._stop_btn.setToolTip("Stop and keep this session in history")

        for btn in (self._reset_btn, self._start_pause_btn, self._skip_btn, self._stop_btn):
            btn_row.addWidget(btn)
        layout.addLayout(btn_row)

        self._sessions_label = QLabel("", card)
        self._sessions_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._sessions_label)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_pause_btn.clicked.connect(self._on_start_pause)
        self._reset_btn.clicked.connect(self._engine.reset)
        self._skip_btn.clicked.connect(self._engine.skip)
        self._stop_btn.clicked.connect(self._engine.stop)
        self._technique_combo.currentIndexChanged.connect(self._on_technique_selected)

        for event in TimerEvent:
            self._engine.connect(event, self._on_timer_event)
        self._engine.state_changed.connect(lambda _state: self.refresh())

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_start_pause(self) -> None:
        if self._engine.state is TimerState.STOPPED:
            self._engine.pomodoro_item.set(
                title=self._title_input.text().strip(),
                description=self._description_input.text().strip(),
            )
        self._engine.start()

    def _on_technique_selected(self, index: int) -> None:
        kind = self._technique_combo.itemData(index)
        if self._engine.set_technique(kind):
            self.technique_changed.emit(kind)
        else:
            # Switching mid-run is refused; put the selector back.
            self._technique_combo.blockSignals(True)
            self._technique_combo.setCurrentIndex(
                self._technique_combo.findData(self._engine.technique_kind)
            )
            self._technique_combo.blockSignals(False)
        self.refresh()

    def _on_timer_event(self, payload: TimerEventPayload) -> None:
        self.refresh(payload)

    def refresh(self, payload: TimerEventPayload | None = None) -> None:
        state = self._engine.state
        data = payload.data if payload is not None else self._engine.get_timer_data()
        self._time_label.setText(data.formatted_time)
        self._phase_label.setText(phase_label(self._engine))
        self._start_pause_btn.setText(START_LABELS[state])

        stopped = state is TimerState.STOPPED
        self._technique_combo.setEnabled(stopped)
        self._title_input.setEnabled(stopped)
        self._description_input.setEnabled(stopped)
        self._skip_btn.setEnabled(not stopped)
        self._stop_btn.setEnabled(not stopped)
        self._reset_btn.setEnabled(not stopped)

        sessions = self._engine.pomodoro_item.get.sessions
        self._sessions_label.setText(f"Sessions: {sessions}" if not stopped else "")

    # ── accessors used by the main window ────────────────────────────────

    def set_title(self, title: str) -> None:
        self._title_input.setText(title)

    def continue_session(self, title: str, description: str) -> bool:
        """Start a new run for an earlier task.  Refused unless stopped."""
        if self._engine.state is not TimerState.STOPPED:
            return False
        self._title_input.setText(title)
        self._description_input.setText(description)
        self._on_start_pause()
        return True

    @property
    def time_text(self) -> str:
        return self._time_label.text()
