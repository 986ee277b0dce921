"""Desktop notifications and background status, both via the tray icon."""

from __future__ import annotations

import logging

from PyQt6.QtWidgets import QSystemTrayIcon

logger = logging.getLogger(__name__)

APP_NAME = "Pomodoro"


class TrayNotifier:
    """Shows timer notifications as tray balloons."""

    def __init__(self, tray_icon: QSystemTrayIcon, settings) -> None:
        self._tray_icon = tray_icon
        self._settings = settings

    def send(self, title: str, body: str) -> None:
        if not self._settings.notifications_enabled:
            return
        if not QSystemTrayIcon.supportsMessages():
            logger.debug("Tray messages unsupported, dropping %r", title)
            return
        self._tray_icon.showMessage(title, body)


class TrayStatusReporter:
    """Puts the running timer into the tray tooltip while the window is hidden."""

    def __init__(self, tray_icon: QSystemTrayIcon) -> None:
        self._tray_icon = tray_icon
        self._message = ""

    @property
    def message(self) -> str:
        return self._message

    def set_status(self, message: str) -> None:
        self._message = message
        self._tray_icon.setToolTip(f"{APP_NAME} — {message}")

    def clear(self) -> None:
        self._message = ""
        self._tray_icon.setToolTip(APP_NAME)
