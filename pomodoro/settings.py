"""Application settings with JSON persistence.

Settings are stored at ``~/.config/Pomodoro/settings.json``::

    settings = load_settings()
    settings.work_time = 50 * 60
    save_settings(settings)

Durations are kept in seconds.  The timer engine reads them when a run
starts from stopped, so edits made while a timer is running or paused
only take effect on the next start.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path.home() / ".config" / "Pomodoro"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    technique: str = "pomodoro"            # pomodoro | flowtime
    work_time: int = 25 * 60               # seconds
    break_time: int = 5 * 60
    long_break: int = 15 * 60
    sessions_long_break: int = 4
    break_time_percentage: int = 20        # flowtime only
    autostart: bool = False

    # ── audio ─────────────────────────────────────────────────────────
    play_sounds: bool = True
    sound_volume: int = 70                 # 0-100
    timer_start_sound: str = "chime"
    timer_break_sound: str = "bell"
    timer_finish_sound: str = "achievement"

    # ── notifications / background ────────────────────────────────────
    notifications_enabled: bool = True
    run_in_background: bool = True

    # ── window ────────────────────────────────────────────────────────
    window_x: int | None = None
    window_y: int | None = None
    window_width: int = 460
    window_height: int = 640


def _coerce(default, value):
    """Convert *value* to the type of *default*; ``TypeError``/``ValueError`` if it can't be."""
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise TypeError(f"expected a boolean, got {value!r}")
        return value
    if isinstance(default, int) or default is None:
        if value is None and default is None:
            return None
        if isinstance(value, bool):
            raise TypeError(f"expected a number, got {value!r}")
        return int(value)
    if isinstance(default, str) and not isinstance(value, str):
        raise TypeError(f"expected a string, got {value!r}")
    return value


def settings_from_dict(data: dict) -> Settings:
    """Build ``Settings`` from a decoded JSON object.

    Unknown keys are dropped.  A value of the wrong type falls back to
    that field's default with a warning, so one bad entry does not
    discard the rest of the file.
    """
    values = {}
    for f in fields(Settings):
        if f.name not in data:
            continue
        try:
            values[f.name] = _coerce(f.default, data[f.name])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid setting %s=%r", f.name, data[f.name])
    return Settings(**values)


def load_settings() -> Settings:
    """Read ``SETTINGS_PATH``; missing or unreadable files give defaults."""
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return settings_from_dict(data)
    except (OSError, ValueError, TypeError):
        logger.warning("Could not read %s, using defaults", SETTINGS_PATH, exc_info=True)
        return Settings()


def save_settings(settings: Settings) -> None:
    """Write *settings* as JSON, replacing the previous file in one step."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    tmp = SETTINGS_PATH.with_suffix(".json.tmp")
    tmp.write_text(json.dumps(asdict(settings), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    tmp.replace(SETTINGS_PATH)
