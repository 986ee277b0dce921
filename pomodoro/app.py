"""Main application window for Pomodoro."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QColor, QIcon, QImage, QKeySequence, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QStatusBar, QMessageBox,
    QSystemTrayIcon, QMenu, QApplication,
)

from .audio.sounds import SoundManager
from .database.history import HistoryStore
from .notifications import APP_NAME, TrayNotifier, TrayStatusReporter
from .settings import Settings, load_settings, save_settings
from .timer.engine import TimerEngine, TimerEvent, TimerEventPayload, TimerState
from .ui.session_history import SessionHistoryWidget
from .ui.timer_widget import TimerWidget

logger = logging.getLogger(__name__)


# ── tray‑icon image generation ────────────────────────────────────────────


def _make_tray_icon(state: TimerState) -> QIcon:
    """Generate a 32×32 monochrome tray icon.

    - STOPPED:  thin circle outline
    - RUNNING:  filled circle
    - PAUSED:   two vertical pause bars
    """
    size = 64  # draw at 2× for HiDPI
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(0, 0, 0, 220)
    p.setPen(Qt.PenStyle.NoPen)
    p.setBrush(colour)

    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if state is TimerState.RUNNING:
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    elif state is TimerState.PAUSED:
        bar_w, bar_h = 8, 28
        gap = 6
        y = cy - bar_h // 2
        p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
        p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)

    p.end()

    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


STATUS_MESSAGES: dict[TimerState, str] = {
    TimerState.STOPPED: "Ready",
    TimerState.RUNNING: "Running",
    TimerState.PAUSED:  "Paused",
}

TIMER_IN_PROGRESS = "Timer already in progress"


class PomodoroApp(QMainWindow):
    """Main application window."""

    def __init__(
        self,
        settings: Settings | None = None,
        store: HistoryStore | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setMinimumSize(420, 560)

        self._geometry_save_timer = QTimer(self)
        self._geometry_save_timer.setSingleShot(True)
        self._geometry_save_timer.setInterval(500)
        self._geometry_save_timer.timeout.connect(self._save_geometry)

        # ── settings + store ──────────────────────────────────────────
        self._settings: Settings = settings if settings is not None else load_settings()
        self._store = store if store is not None else HistoryStore()

        # ── system tray icon ──────────────────────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.setIcon(_make_tray_icon(TimerState.STOPPED))
        self._tray_icon.setToolTip(APP_NAME)
        self._tray_icon.activated.connect(self._on_tray_activated)

        # ── collaborators ─────────────────────────────────────────────
        self._notifier = TrayNotifier(self._tray_icon, self._settings)
        self._status_reporter = TrayStatusReporter(self._tray_icon)
        self._sound_manager = SoundManager(self._settings, parent=self)

        self._timer_engine = TimerEngine(
            self._store,
            self._settings,
            self,
            notifier=self._notifier,
            sound_player=self._sound_manager,
            status_reporter=self._status_reporter,
            window_visible=self.isVisible,
        )

        # ── central widget ────────────────────────────────────────────
        central = QWidget()
        self.setCentralWidget(central)
        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(16, 12, 16, 12)
        root_layout.setSpacing(8)

        self._timer_widget = TimerWidget(self._timer_engine, central)
        self._timer_widget.technique_changed.connect(self._on_technique_changed)
        root_layout.addWidget(self._timer_widget)

        self._session_history = SessionHistoryWidget(self._store, central)
        self._session_history.continue_requested.connect(self._continue_session)
        root_layout.addWidget(self._session_history)
        root_layout.addStretch()

        self._status_bar = QStatusBar(self)
        self.setStatusBar(self._status_bar)
        self._status_bar.showMessage(STATUS_MESSAGES[TimerState.STOPPED])

        self._build_tray_menu()
        self._tray_icon.show()
        self._build_menu_bar()

        # ── wire engine ───────────────────────────────────────────────
        self._timer_engine.state_changed.connect(self._on_state_changed)
        self._timer_engine.connect(TimerEvent.START, self._on_history_changed)
        self._timer_engine.connect(TimerEvent.STOP, self._on_history_changed)
        self._timer_engine.connect(TimerEvent.END, self._on_history_changed)

        self._session_history.refresh()
        self._restore_geometry()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def timer_engine(self) -> TimerEngine:
        return self._timer_engine

    # ══════════════════════════════════════════════════════════════════
    #  SYSTEM TRAY
    # ══════════════════════════════════════════════════════════════════

    def _build_tray_menu(self) -> None:
        """Create the right-click context menu for the tray icon."""
        menu = QMenu(self)

        self._tray_start_action = menu.addAction("Start")
        self._tray_start_action.triggered.connect(self._timer_engine.start)

        self._tray_skip_action = menu.addAction("Skip")
        self._tray_skip_action.triggered.connect(self._timer_engine.skip)

        self._tray_stop_action = menu.addAction("Stop")
        self._tray_stop_action.triggered.connect(self._timer_engine.stop)

        menu.addSeparator()

        show_action = menu.addAction(f"Show {APP_NAME}")
        show_action.triggered.connect(self._show_window)

        menu.addSeparator()

        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_with_confirm)

        self._tray_icon.setContextMenu(menu)

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        """Left-click on tray icon → toggle window visibility."""
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self._show_window()

    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()
        self._status_reporter.clear()

    def _quit_app(self) -> None:
        """Actually quit (don't just minimize)."""
        self._tray_icon.hide()
        QApplication.instance().quit()

    def _update_tray_state(self, state: TimerState) -> None:
        """Update tray icon image and menu labels for current state."""
        self._tray_icon.setIcon(_make_tray_icon(state))
        if state is TimerState.STOPPED:
            self._tray_start_action.setText("Start")
        elif state is TimerState.PAUSED:
            self._tray_start_action.setText("Resume")
        else:
            self._tray_start_action.setText("Pause")
        self._tray_skip_action.setEnabled(state is not TimerState.STOPPED)
        self._tray_stop_action.setEnabled(state is not TimerState.STOPPED)

    # ══════════════════════════════════════════════════════════════════
    #  MENU BAR
    # ══════════════════════════════════════════════════════════════════

    def _build_menu_bar(self) -> None:
        menu_bar = self.menuBar()

        about_action = QAction(f"About {APP_NAME}", self)
        about_action.setMenuRole(QAction.MenuRole.AboutRole)
        about_action.triggered.connect(self._show_about)

        prefs_action = QAction("Preferences…", self)
        prefs_action.setMenuRole(QAction.MenuRole.PreferencesRole)
        prefs_action.setShortcut(QKeySequence("Ctrl+,"))
        prefs_action.triggered.connect(self._open_settings)

        quit_action = QAction(f"Quit {APP_NAME}", self)
        quit_action.setMenuRole(QAction.MenuRole.QuitRole)
        quit_action.setShortcut(QKeySequence("Ctrl+Q"))
        quit_action.triggered.connect(self._quit_with_confirm)

        app_menu = menu_bar.addMenu(APP_NAME)
        app_menu.addAction(about_action)
        app_menu.addAction(prefs_action)
        app_menu.addAction(quit_action)

        timer_menu = menu_bar.addMenu("Timer")
        for text, shortcut, slot in (
            ("Skip", "Ctrl+N", self._timer_engine.skip),
            ("Stop", "Ctrl+S", self._timer_engine.stop),
        ):
            action = QAction(text, self)
            action.setShortcut(QKeySequence(shortcut))
            action.triggered.connect(slot)
            timer_menu.addAction(action)

    def _show_about(self) -> None:
        QMessageBox.about(
            self,
            f"About {APP_NAME}",
            f"<h3>{APP_NAME}</h3>"
            "<p>A Pomodoro and Flowtime timer that keeps a history of "
            "your work and break time.</p>",
        )

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, state: TimerState) -> None:
        self._status_bar.showMessage(STATUS_MESSAGES[state])
        self._update_tray_state(state)
        if state is TimerState.STOPPED:
            self._status_reporter.clear()

    def _on_history_changed(self, _payload: TimerEventPayload) -> None:
        self._session_history.refresh()

    def _continue_session(self, title: str, description: str) -> None:
        if not self._timer_widget.continue_session(title, description):
            self._status_bar.showMessage(TIMER_IN_PROGRESS, 3000)

    def _on_technique_changed(self, kind) -> None:
        self._settings.technique = kind.value
        save_settings(self._settings)

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _open_settings(self) -> None:
        """Open the settings dialog and apply any changes."""
        from .ui.settings_dialog import SettingsDialog

        def _preview_click():
            self._sound_manager.set_volume(self._settings.sound_volume)
            self._sound_manager.play_sound("click")

        dlg = SettingsDialog(
            self._settings,
            parent=self,
            sound_preview_callback=_preview_click,
        )
        dlg.exec()
        self._apply_settings()

    def _apply_settings(self) -> None:
        """Push current Settings into all subsystems."""
        self._sound_manager.set_volume(self._settings.sound_volume)
        # Durations only reach a running timer on its next start.
        self._timer_engine.reload_settings()
        self._timer_widget.refresh()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW STATE
    # ══════════════════════════════════════════════════════════════════

    def _restore_geometry(self) -> None:
        s = self._settings
        if s.window_x is not None and s.window_y is not None:
            self.move(s.window_x, s.window_y)
        if s.window_width and s.window_height:
            self.resize(s.window_width, s.window_height)

    def _save_geometry(self) -> None:
        if not self.isVisible():
            return
        pos = self.pos()
        size = self.size()
        self._settings.window_x = pos.x()
        self._settings.window_y = pos.y()
        self._settings.window_width = size.width()
        self._settings.window_height = size.height()
        save_settings(self._settings)

    def _schedule_geometry_save(self) -> None:
        """Debounce geometry saves: restart the 500ms timer on each move/resize."""
        if hasattr(self, "_geometry_save_timer"):
            self._geometry_save_timer.start()

    def _timer_active(self) -> bool:
        return self._timer_engine.state is not TimerState.STOPPED

    def _confirm_stop(self) -> bool:
        """Ask before abandoning a running or paused timer."""
        if not self._timer_active():
            return True
        reply = QMessageBox.question(
            self,
            "Stop timer?",
            "There is a running timer. Stop it and exit the application?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return reply == QMessageBox.StandardButton.Yes

    def _quit_with_confirm(self) -> None:
        if not self._confirm_stop():
            return
        if self._timer_active():
            self._timer_engine.stop()
        self._save_geometry()
        self._quit_app()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """Keep a live timer running from the tray, otherwise quit."""
        self._save_geometry()
        if (
            self._settings.run_in_background
            and self._timer_active()
            and self._tray_icon.isVisible()
        ):
            event.ignore()
            self.hide()
            return
        if not self._confirm_stop():
            event.ignore()
            return
        if self._timer_active():
            self._timer_engine.stop()
        self._tray_icon.hide()
        event.accept()

    def _on_space(self) -> None:
        """Start, pause, or resume the timer."""
        # No-op while the user is typing a title or description
        focused = QApplication.focusWidget()
        if focused is not None and focused.inherits("QLineEdit"):
            return
        self._timer_widget._on_start_pause()

    def _on_escape(self) -> None:
        """Reset the timer (no-op when stopped)."""
        if self._timer_active():
            self._timer_engine.reset()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Handle Space (start/pause) and Escape (reset) globally."""
        key = event.key()
        if key == Qt.Key.Key_Space and not event.modifiers():
            self._on_space()
            event.accept()
            return
        if key == Qt.Key.Key_Escape:
            self._on_escape()
            event.accept()
            return
        super().keyPressEvent(event)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._schedule_geometry_save()

    def moveEvent(self, event) -> None:  # type: ignore[override]
        super().moveEvent(event)
        self._schedule_geometry_save()
