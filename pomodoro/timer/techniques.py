"""Timing policies the engine can run: Pomodoro and Flowtime.

Both share the engine's control flow (start / stop / reset / skip and the
one-second tick) and differ only in how the counter moves, when a cycle
is over, and what skipping does.

Pomodoro
--------
``current_time`` counts *down* from ``work_time``.  Positive values are
work; once it passes zero it keeps going negative through the break and
the cycle ends when it reaches ``-current_break_time``.

Flowtime
--------
``current_time`` counts *up* from zero for as long as the user works.
Skipping after more than ``SKIP_THRESHOLD`` seconds turns the elapsed
work into a negative break allowance which then counts back up to zero.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum


class TechniqueKind(Enum):
    POMODORO = "pomodoro"
    FLOWTIME = "flowtime"


class Boundary(Enum):
    """Phase edges that trigger a notification + sound on the tick."""
    STARTED = "started"
    BREAK = "break"


class SkipResult(Enum):
    CONTINUE = "continue"   # keep running, counter moved
    BREAK = "break"         # jumped straight into a break
    FINISH = "finish"       # cycle is over, engine runs its finish routine


# ── snapshots ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PomodoroData:
    timer_state: str
    work_time: int
    break_time: int
    current_time: int
    formatted_time: str

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class FlowtimeData:
    timer_state: str
    timer_stage: str
    current_time: int
    formatted_time: str

    def as_dict(self) -> dict:
        return asdict(self)


def format_time(seconds: int) -> str:
    """``HH:MM:SS`` for a non-negative number of seconds."""
    seconds = abs(int(seconds))
    hours = seconds // 60 // 60
    minutes = seconds // 60 % 60
    return f"{hours:02d}:{minutes:02d}:{seconds % 60:02d}"


# ── base ──────────────────────────────────────────────────────────────────


class Technique:
    """Policy hooks called by ``TimerEngine``."""

    kind: TechniqueKind
    started_label = "Pomodoro started"

    def reset(self) -> None:
        """Put the counters back to the beginning of a cycle."""
        raise NotImplementedError

    def boundary(self) -> Boundary | None:
        """Edge reached by the counter *before* this tick advances it."""
        raise NotImplementedError

    def in_work_phase(self) -> bool:
        raise NotImplementedError

    def advance(self) -> None:
        raise NotImplementedError

    def is_finished(self) -> bool:
        raise NotImplementedError

    def skip(self) -> SkipResult:
        raise NotImplementedError

    def on_cycle_complete(self, sessions: int) -> int:
        """Hook run after a finished cycle; returns the session count to keep."""
        return sessions

    def displayed_seconds(self) -> int:
        raise NotImplementedError

    def format_time(self) -> str:
        return format_time(self.displayed_seconds())

    def snapshot(self, timer_state: str):
        raise NotImplementedError


# ── pomodoro ──────────────────────────────────────────────────────────────


class Pomodoro(Technique):
    """Fixed work/break intervals with a long break every N cycles."""

    kind = TechniqueKind.POMODORO
    started_label = "Pomodoro started"

    def __init__(
        self,
        work_time: int = 1500,
        break_time: int = 300,
        long_break: int = 900,
        sessions_long_break: int = 4,
    ) -> None:
        self._work_time = work_time
        self._break_time = break_time
        self._long_break = long_break
        self._sessions_long_break = sessions_long_break
        self.current_time = work_time
        self.current_break_time = break_time

    @property
    def work_time(self) -> int:
        return self._work_time

    @property
    def break_time(self) -> int:
        return self._break_time

    @property
    def long_break(self) -> int:
        return self._long_break

    @property
    def sessions_long_break(self) -> int:
        return self._sessions_long_break

    def reset(self) -> None:
        self.current_time = self._work_time
        self.current_break_time = self._break_time

    def boundary(self) -> Boundary | None:
        if self.current_time == self._work_time:
            return Boundary.STARTED
        if self.current_time == 0:
            return Boundary.BREAK
        return None

    def in_work_phase(self) -> bool:
        return self.current_time > 0

    def advance(self) -> None:
        self.current_time -= 1

    def is_finished(self) -> bool:
        return not self.current_time > -self.current_break_time

    def skip(self) -> SkipResult:
        if self.current_time > -1:
            # Land on the last work second; the next tick opens the break.
            self.current_time = 1
            return SkipResult.CONTINUE
        self.reset()
        return SkipResult.FINISH

    def on_cycle_complete(self, sessions: int) -> int:
        if sessions == self._sessions_long_break:
            self.current_break_time = self._long_break
            return 0
        return sessions

    def displayed_seconds(self) -> int:
        if self.current_time < 0:
            return abs(self.current_time + self.current_break_time)
        return abs(self.current_time)

    def snapshot(self, timer_state: str) -> PomodoroData:
        return PomodoroData(
            timer_state=timer_state,
            work_time=self._work_time,
            break_time=self._break_time,
            current_time=self.current_time,
            formatted_time=self.format_time(),
        )

    def __repr__(self) -> str:
        return (
            f"<Pomodoro work={self._work_time} break={self._break_time} "
            f"long={self._long_break}/{self._sessions_long_break} "
            f"current={self.current_time}>"
        )


# ── flowtime ──────────────────────────────────────────────────────────────


WORK_STAGE = "work_time"
BREAK_STAGE = "break_time"


class Flowtime(Technique):
    """Open-ended work; the break is a percentage of the work done."""

    kind = TechniqueKind.FLOWTIME
    started_label = "Flow time started"

    # Tuning constants carried over unchanged from the desktop app this
    # timer replaces.  Neither has a documented derivation.
    SKIP_THRESHOLD = 10
    BREAK_MULTIPLIER = 5

    def __init__(self, break_time_percentage: int = 20) -> None:
        self._break_time_percentage = break_time_percentage
        self.current_time = 0
        self.timer_stage = WORK_STAGE

    @property
    def break_time_percentage(self) -> int:
        return self._break_time_percentage

    def reset(self) -> None:
        self.current_time = 0
        self.timer_stage = WORK_STAGE

    def boundary(self) -> Boundary | None:
        if self.current_time == 1:
            return Boundary.STARTED
        return None

    def in_work_phase(self) -> bool:
        return self.current_time >= 0

    def advance(self) -> None:
        self.current_time += 1

    def is_finished(self) -> bool:
        return self.current_time == 0

    def break_allowance(self) -> int:
        """Break length, in seconds, earned by the current work counter."""
        # floor(pct / 100 * current * 5) without float rounding
        return (
            self._break_time_percentage
            * self.current_time
            * self.BREAK_MULTIPLIER
            // 100
        )

    def skip(self) -> SkipResult:
        allowance = self.break_allowance()
        # A zero allowance would leave the counter at 0 in the work phase.
        if self.current_time > self.SKIP_THRESHOLD and allowance > 0:
            self.current_time = -allowance
            self.timer_stage = BREAK_STAGE
            return SkipResult.BREAK
        self.reset()
        return SkipResult.FINISH

    def displayed_seconds(self) -> int:
        return abs(self.current_time)

    def snapshot(self, timer_state: str) -> FlowtimeData:
        return FlowtimeData(
            timer_state=timer_state,
            timer_stage=self.timer_stage,
            current_time=self.current_time,
            formatted_time=self.format_time(),
        )

    def __repr__(self) -> str:
        return (
            f"<Flowtime pct={self._break_time_percentage} "
            f"stage={self.timer_stage} current={self.current_time}>"
        )


# ── factory ───────────────────────────────────────────────────────────────


def create_technique(kind: TechniqueKind | str, settings) -> Technique:
    """Build a technique from the current settings values."""
    kind = TechniqueKind(kind)
    if kind is TechniqueKind.FLOWTIME:
        return Flowtime(
            break_time_percentage=max(0, int(settings.break_time_percentage)),
        )
    return Pomodoro(
        work_time=max(1, int(settings.work_time)),
        break_time=max(1, int(settings.break_time)),
        long_break=max(1, int(settings.long_break)),
        sessions_long_break=max(1, int(settings.sessions_long_break)),
    )
