"""Settings dialog for Pomodoro.

A modal dialog that lets users configure timer durations, the Flowtime
break percentage, sounds and notification preferences.  Changes are
saved immediately to disk; the caller re-applies them after ``exec()``.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSpinBox, QSlider, QCheckBox, QPushButton, QComboBox,
    QFrame, QWidget,
)

from ..audio.sounds import SOUND_NAMES
from ..settings import Settings, save_settings


class SettingsDialog(QDialog):
    """Modal dialog for all user preferences."""

    def __init__(
        self,
        settings: Settings,
        parent: QWidget | None = None,
        *,
        sound_preview_callback: callable | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Preferences")
        self.setMinimumWidth(420)
        self.setModal(True)

        self._settings = settings
        self._sound_preview = sound_preview_callback
        self._populating = False

        self._build_ui()
        self._populate()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Pomodoro section ─────────────────────────────────────────
        root.addWidget(self._section_label("Pomodoro"))
        timer_form = self._form()

        self._work_spin = self._minutes_spin(1, 240)
        timer_form.addRow("Work time:", self._work_spin)

        self._break_spin = self._minutes_spin(1, 60)
        timer_form.addRow("Break time:", self._break_spin)

        self._long_spin = self._minutes_spin(1, 120)
        timer_form.addRow("Long break:", self._long_spin)

        self._sessions_spin = QSpinBox()
        self._sessions_spin.setRange(1, 12)
        self._sessions_spin.valueChanged.connect(self._on_timer_changed)
        timer_form.addRow("Sessions before long break:", self._sessions_spin)

        root.addLayout(timer_form)

        # ── Flowtime section ─────────────────────────────────────────
        root.addWidget(self._section_label("Flowtime"))
        flow_form = self._form()

        self._percentage_spin = QSpinBox()
        self._percentage_spin.setRange(1, 100)
        self._percentage_spin.setSuffix(" %")
        self._percentage_spin.valueChanged.connect(self._on_timer_changed)
        flow_form.addRow("Break time percentage:", self._percentage_spin)

        self._autostart_cb = QCheckBox("Start the next cycle automatically")
        self._autostart_cb.toggled.connect(self._on_toggle_changed)
        flow_form.addRow("", self._autostart_cb)

        root.addLayout(flow_form)
        root.addWidget(self._separator())

        # ── Sound & Notifications section ────────────────────────────
        root.addWidget(self._section_label("Sound & Notifications"))
        snd_form = self._form()

        self._sound_cb = QCheckBox("Play sounds")
        self._sound_cb.toggled.connect(self._on_toggle_changed)
        snd_form.addRow("", self._sound_cb)

        self._sound_combos: dict[str, QComboBox] = {}
        for key, label in (
            ("timer_start_sound", "Start sound:"),
            ("timer_break_sound", "Break sound:"),
            ("timer_finish_sound", "Finish sound:"),
        ):
            combo = QComboBox()
            for name in SOUND_NAMES:
                combo.addItem(name.replace("_", " ").title(), name)
            combo.currentIndexChanged.connect(self._on_sound_changed)
            self._sound_combos[key] = combo
            snd_form.addRow(label, combo)

        vol_row = QHBoxLayout()
        vol_row.setSpacing(10)
        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_slider.setTickInterval(10)
        self._vol_label = QLabel("70%")
        self._vol_label.setMinimumWidth(36)
        self._vol_slider.valueChanged.connect(self._on_volume_changed)
        self._vol_slider.sliderReleased.connect(self._on_volume_released)
        vol_row.addWidget(self._vol_slider)
        vol_row.addWidget(self._vol_label)

        vol_wrapper = QWidget()
        vol_wrapper.setLayout(vol_row)
        snd_form.addRow("Volume:", vol_wrapper)

        self._notif_cb = QCheckBox("Desktop notifications")
        self._notif_cb.toggled.connect(self._on_toggle_changed)
        snd_form.addRow("", self._notif_cb)

        self._background_cb = QCheckBox("Keep running in the background when closed")
        self._background_cb.toggled.connect(self._on_toggle_changed)
        snd_form.addRow("", self._background_cb)

        root.addLayout(snd_form)

        # ── close button ─────────────────────────────────────────────
        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        root.addLayout(btn_row)

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        return line

    @staticmethod
    def _form() -> QFormLayout:
        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(20)
        form.setVerticalSpacing(10)
        return form

    def _minutes_spin(self, low: int, high: int) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(low, high)
        spin.setSuffix(" min")
        spin.valueChanged.connect(self._on_timer_changed)
        return spin

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE FROM SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        self._populating = True
        s = self._settings
        self._work_spin.setValue(s.work_time // 60)
        self._break_spin.setValue(s.break_time // 60)
        self._long_spin.setValue(s.long_break // 60)
        self._sessions_spin.setValue(s.sessions_long_break)
        self._percentage_spin.setValue(s.break_time_percentage)
        self._autostart_cb.setChecked(s.autostart)
        self._sound_cb.setChecked(s.play_sounds)
        for key, combo in self._sound_combos.items():
            index = combo.findData(getattr(s, key))
            combo.setCurrentIndex(max(index, 0))
        self._vol_slider.setValue(s.sound_volume)
        self._vol_label.setText(f"{s.sound_volume}%")
        self._notif_cb.setChecked(s.notifications_enabled)
        self._background_cb.setChecked(s.run_in_background)
        self._populating = False

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLERS (save immediately)
    # ══════════════════════════════════════════════════════════════════

    def _on_timer_changed(self) -> None:
        if self._populating:
            return
        self._settings.work_time = self._work_spin.value() * 60
        self._settings.break_time = self._break_spin.value() * 60
        self._settings.long_break = self._long_spin.value() * 60
        self._settings.sessions_long_break = self._sessions_spin.value()
        self._settings.break_time_percentage = self._percentage_spin.value()
        self._save()

    def _on_toggle_changed(self) -> None:
        if self._populating:
            return
        self._settings.autostart = self._autostart_cb.isChecked()
        self._settings.play_sounds = self._sound_cb.isChecked()
        self._settings.notifications_enabled = self._notif_cb.isChecked()
        self._settings.run_in_background = self._background_cb.isChecked()
        self._save()

    def _on_sound_changed(self) -> None:
        if self._populating:
            return
        for key, combo in self._sound_combos.items():
            setattr(self._settings, key, combo.currentData())
        self._save()

    def _on_volume_changed(self, value: int) -> None:
        self._vol_label.setText(f"{value}%")
        if self._populating:
            return
        self._settings.sound_volume = value
        self._save()

    def _on_volume_released(self) -> None:
        """Play a click sound when the user releases the volume slider."""
        if self._sound_preview:
            self._sound_preview()

    def _save(self) -> None:
        save_settings(self._settings)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def settings(self) -> Settings:
        return self._settings
