"""Timer state machine for Pomodoro.

States
------
STOPPED   No run in progress.  The session record is a blank default.
RUNNING   The one-second tick mutates the counter and the record.
PAUSED    The tick keeps firing but does nothing (the cycle-finished
          state is PAUSED too, until the user or ``autostart`` resumes).

Transitions
-----------
STOPPED → RUNNING      start   (new record saved, tick loop begins)
PAUSED  → RUNNING      start   (same record, same loop)
RUNNING → PAUSED       start   (start doubles as pause)
RUNNING → PAUSED       cycle finished
Any     → STOPPED      stop    (record kept) / reset (record deleted)
RUNNING | PAUSED → RUNNING  skip (when the skip does not finish the cycle)

Events
------
Listeners registered with ``connect(event, listener)`` are called in
registration order with a ``TimerEventPayload``:

start   run started or resumed
pause   run paused by the user
stop    stopped or reset
run     after every working tick
end     a cycle finished

Collaborators (store, notifier, sound player, background status) are
fire-and-forget: a failure is logged and the engine keeps going.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from PyQt6.QtCore import QObject, pyqtSignal

from ..database.history import HistoryItem, HistoryStore
from .scheduler import CONTINUE, REMOVE, QtScheduler, Scheduler
from .session import SessionRecord
from .techniques import (
    Boundary,
    FlowtimeData,
    PomodoroData,
    SkipResult,
    Technique,
    TechniqueKind,
    create_technique,
)
from .time_utils import TimeInfo, time_utils as default_time_utils

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class TimerEvent(Enum):
    START = "start"
    PAUSE = "pause"
    STOP = "stop"
    RUN = "run"
    END = "end"


TimerData = Union[PomodoroData, FlowtimeData]


@dataclass(frozen=True)
class TimerEventPayload:
    data: TimerData
    pomodoro_item: HistoryItem


Listener = Callable[[TimerEventPayload], None]


# ── labels ────────────────────────────────────────────────────────────────

BREAK_LABEL = "Pomodoro break time"
FINISHED_LABEL = "Pomodoro finished"
PAUSED_STATUS = "Paused"
WORK_STATUS = "Work time"
BREAK_STATUS = "Break time"


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Pomodoro / Flowtime timer with incremental history persistence.

    Signals
    -------
    state_changed(new_state: TimerState)
        Emitted on every state transition, including the ones that have
        no lifecycle event of their own (skip resuming a paused run).
    """

    state_changed = pyqtSignal(object)

    def __init__(
        self,
        store: HistoryStore,
        settings,
        parent: QObject | None = None,
        *,
        notifier=None,
        sound_player=None,
        status_reporter=None,
        scheduler: Scheduler | None = None,
        window_visible: Callable[[], bool] | None = None,
        time_utils: Callable[[], TimeInfo] = default_time_utils,
    ) -> None:
        super().__init__(parent)

        # ── collaborators ─────────────────────────────────────────────
        self._settings = settings
        self._notifier = notifier
        self._sound_player = sound_player
        self._status_reporter = status_reporter
        self._scheduler = scheduler if scheduler is not None else QtScheduler(self)
        self._window_visible = window_visible or (lambda: True)

        # ── state ─────────────────────────────────────────────────────
        self._state: TimerState = TimerState.STOPPED
        self._kind: TechniqueKind = self._kind_from_settings()
        self._technique: Technique = create_technique(self._kind, settings)
        self._session = SessionRecord(store, time_utils)
        self._listeners: dict[TimerEvent, list[Listener]] = {
            event: [] for event in TimerEvent
        }
        # Each start() from STOPPED owns one tick loop; older loops
        # see a stale id and remove themselves.
        self._loop_id: int = 0

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def technique(self) -> Technique:
        return self._technique

    @property
    def technique_kind(self) -> TechniqueKind:
        return self._kind

    @property
    def pomodoro_item(self) -> SessionRecord:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._state is TimerState.RUNNING

    def get_timer_data(self) -> TimerData:
        return self._technique.snapshot(self._state.value)

    get_data = get_timer_data

    def format_time(self) -> str:
        return self._technique.format_time()

    # ══════════════════════════════════════════════════════════════════
    #  EVENTS
    # ══════════════════════════════════════════════════════════════════

    def connect(self, event: TimerEvent | str, listener: Listener) -> None:
        """Register *listener* for *event* (``ValueError`` if unknown)."""
        self._listeners[TimerEvent(event)].append(listener)

    def remove_listener(self, event: TimerEvent | str, listener: Listener) -> None:
        listeners = self._listeners[TimerEvent(event)]
        if listener in listeners:
            listeners.remove(listener)

    # ══════════════════════════════════════════════════════════════════
    #  CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    def set_technique(self, kind: TechniqueKind | str) -> bool:
        """Switch technique.  Only allowed while STOPPED."""
        kind = TechniqueKind(kind)
        if self._state is not TimerState.STOPPED:
            logger.warning(
                "Refusing to switch technique to %s while %s",
                kind.value, self._state.value,
            )
            return False
        self._kind = kind
        self._technique = create_technique(kind, self._settings)
        logger.debug("Technique set to %r", self._technique)
        return True

    def reload_settings(self) -> None:
        """Pick up edited durations for the idle display (STOPPED only)."""
        if self._state is TimerState.STOPPED:
            self._technique = create_technique(self._kind, self._settings)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start a new run, resume a paused one, or pause a running one."""
        if self._state is TimerState.STOPPED:
            self._technique = create_technique(self._kind, self._settings)
            self._technique.reset()
            self._set_state(TimerState.RUNNING)
            self._call("save session", self._session.save)
            self._run()
            self._emit(TimerEvent.START)
        elif self._state is TimerState.PAUSED:
            self._set_state(TimerState.RUNNING)
            self._emit(TimerEvent.START)
        else:
            self._set_state(TimerState.PAUSED)
            self._emit(TimerEvent.PAUSE)

    def stop(self) -> None:
        """End the run, keeping what was recorded so far."""
        self._technique.reset()
        self._set_state(TimerState.STOPPED)
        self._call("update session", self._session.update)
        self._session.default_item()
        self._emit(TimerEvent.STOP)

    def reset(self) -> None:
        """End the run and discard its record."""
        self._technique.reset()
        self._set_state(TimerState.STOPPED)
        self._call("delete session", self._session.delete)
        if self._session.get.id is not None:
            self._session.default_item()
        self._emit(TimerEvent.STOP)

    def skip(self) -> None:
        """Jump to the next phase, or finish the cycle."""
        if self._state is TimerState.STOPPED:
            logger.debug("Nothing to skip while stopped")
            return
        result = self._technique.skip()
        if result is SkipResult.FINISH:
            self._finish()
            return
        self._set_state(TimerState.RUNNING)
        if result is SkipResult.BREAK:
            self._notify(BREAK_LABEL)
            self._play("timer_break_sound")

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: TICK LOOP
    # ══════════════════════════════════════════════════════════════════

    def _run(self) -> None:
        self._loop_id += 1
        loop_id = self._loop_id
        self._scheduler.add_seconds(1, lambda: self._on_tick(loop_id))

    def _on_tick(self, loop_id: int | None = None) -> bool:
        if loop_id is not None and loop_id != self._loop_id:
            return REMOVE
        if self._state is TimerState.STOPPED:
            return REMOVE
        if self._state is TimerState.PAUSED:
            self._background_status(PAUSED_STATUS)
            return CONTINUE

        technique = self._technique
        boundary = technique.boundary()
        if boundary is Boundary.STARTED:
            self._notify(technique.started_label)
            self._play("timer_start_sound")
        elif boundary is Boundary.BREAK:
            self._notify(BREAK_LABEL)
            self._play("timer_break_sound")

        item = self._session.get
        working = technique.in_work_phase()
        if working:
            self._session.set(work_time=item.work_time + 1)
        else:
            self._session.set(break_time=item.break_time + 1)

        label = WORK_STATUS if working else BREAK_STATUS
        self._background_status(f"{label}: {technique.format_time()}")

        technique.advance()
        self._call("update session", self._session.update)
        self._emit(TimerEvent.RUN)

        # A RUN listener may have stopped or restarted us.
        if self._state is TimerState.RUNNING and self._technique.is_finished():
            self._finish()
        return CONTINUE

    def _finish(self) -> None:
        self._set_state(TimerState.PAUSED)
        self._background_status(PAUSED_STATUS)

        self._technique.reset()
        self._session.set(sessions=self._session.get.sessions + 1)
        self._emit(TimerEvent.END)
        self._session.set(
            sessions=self._technique.on_cycle_complete(self._session.get.sessions),
        )

        if self._settings.autostart:
            self.start()

        self._call("update session", self._session.update)
        self._notify(FINISHED_LABEL)
        self._play("timer_finish_sound")

    def _set_state(self, new_state: TimerState) -> None:
        if new_state is not self._state:
            logger.debug("Timer %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        self.state_changed.emit(new_state)

    def _emit(self, event: TimerEvent) -> None:
        payload = TimerEventPayload(
            data=self.get_timer_data(),
            pomodoro_item=self._session.snapshot(),
        )
        for listener in list(self._listeners[event]):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener for %r failed", event.value)

    def _kind_from_settings(self) -> TechniqueKind:
        try:
            return TechniqueKind(self._settings.technique)
        except ValueError:
            logger.warning(
                "Unknown technique %r in settings, using pomodoro",
                self._settings.technique,
            )
            return TechniqueKind.POMODORO

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: COLLABORATORS
    # ══════════════════════════════════════════════════════════════════

    def _call(self, what: str, fn, *args):
        try:
            return fn(*args)
        except Exception:
            logger.exception("Could not %s", what)
            return None

    def _notify(self, label: str) -> None:
        if self._notifier is None:
            return
        item = self._session.get
        self._call(
            "send notification",
            self._notifier.send,
            f"{label} - {item.title}",
            f"Description: {item.description}\nCreated at: {item.display_date}",
        )

    def _play(self, sound_settings: str) -> None:
        if self._sound_player is not None:
            self._call("play sound", self._sound_player.play, sound_settings)

    def _background_status(self, message: str) -> None:
        if self._status_reporter is None:
            return
        if self._window_visible():
            return
        self._call("set background status", self._status_reporter.set_status, message)
