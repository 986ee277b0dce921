"""Repeating-callback scheduler backed by ``QTimer``.

A callback registered with ``add_seconds`` is invoked every *interval*
seconds on the Qt event loop until it returns ``REMOVE``.  There is no
handle to cancel a registration from the outside.
"""

from __future__ import annotations

from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer


CONTINUE = True
REMOVE = False


class Scheduler(Protocol):
    def add_seconds(self, interval: int, callback: Callable[[], bool]) -> None:
        ...


class QtScheduler(QObject):
    """Owns one ``QTimer`` per live registration."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timers: list[QTimer] = []

    @property
    def active(self) -> int:
        """Number of registrations still firing."""
        return len(self._timers)

    def add_seconds(self, interval: int, callback: Callable[[], bool]) -> None:
        timer = QTimer(self)
        timer.setInterval(interval * 1000)
        timer.timeout.connect(lambda: self._fire(timer, callback))
        self._timers.append(timer)
        timer.start()

    def _fire(self, timer: QTimer, callback: Callable[[], bool]) -> None:
        if callback() is REMOVE:
            timer.stop()
            self._timers.remove(timer)
            timer.deleteLater()
