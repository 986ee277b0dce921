"""Timer package."""

from .engine import (
    TimerEngine,
    TimerState,
    TimerEvent,
    TimerEventPayload,
)
from .techniques import (
    Pomodoro,
    Flowtime,
    PomodoroData,
    FlowtimeData,
    TechniqueKind,
    create_technique,
    format_time,
)
from .session import SessionRecord

__all__ = [
    "TimerEngine",
    "TimerState",
    "TimerEvent",
    "TimerEventPayload",
    "Pomodoro",
    "Flowtime",
    "PomodoroData",
    "FlowtimeData",
    "TechniqueKind",
    "create_technique",
    "format_time",
    "SessionRecord",
]
