"""Tests for settings persistence, sound synthesis and the settings dialog.

Covers:
- Settings dataclass defaults and JSON round-trip
- SoundManager WAV generation and playback API
- SettingsDialog creation and value population
"""

from __future__ import annotations

import io
import json
import wave

import pytest

from pomodoro.settings import Settings, load_settings, save_settings
from pomodoro.audio.sounds import (
    SoundManager,
    SOUND_NAMES,
    SOUND_SETTINGS,
    _generate_chime,
    _generate_achievement,
    _generate_bell,
    _generate_double_tap,
    _generate_click,
)

GENERATORS = [
    _generate_chime,
    _generate_achievement,
    _generate_bell,
    _generate_double_tap,
    _generate_click,
]


# ═══════════════════════════════════════════════════════════════════════
#  SETTINGS
# ═══════════════════════════════════════════════════════════════════════


class TestSettingsDefaults:
    def test_technique(self):
        assert Settings().technique == "pomodoro"

    def test_durations_in_seconds(self):
        s = Settings()
        assert s.work_time == 25 * 60
        assert s.break_time == 5 * 60
        assert s.long_break == 15 * 60

    def test_sessions_long_break(self):
        assert Settings().sessions_long_break == 4

    def test_break_time_percentage(self):
        assert Settings().break_time_percentage == 20

    def test_autostart_off(self):
        assert Settings().autostart is False

    def test_sound_defaults(self):
        s = Settings()
        assert s.play_sounds is True
        assert s.sound_volume == 70
        for key in SOUND_SETTINGS:
            assert getattr(s, key) in SOUND_NAMES

    def test_background_defaults(self):
        s = Settings()
        assert s.notifications_enabled is True
        assert s.run_in_background is True


class TestSettingsPersistence:
    def test_round_trip(self, settings_path):
        """save → load produces identical settings."""
        original = Settings(technique="flowtime", work_time=30 * 60, sound_volume=42)
        save_settings(original)
        loaded = load_settings()
        assert loaded == original
        assert settings_path.exists()

    def test_missing_file_returns_defaults(self):
        assert load_settings() == Settings()

    def test_invalid_json_returns_defaults(self, settings_path, caplog):
        settings_path.write_text("NOT VALID JSON", encoding="utf-8")
        assert load_settings().work_time == 25 * 60
        assert "using defaults" in caplog.text

    def test_wrong_shape_returns_defaults(self, settings_path):
        settings_path.write_text("[1, 2, 3]", encoding="utf-8")
        assert load_settings() == Settings()

    def test_extra_keys_ignored(self, settings_path):
        data = {"work_time": 1800, "unknown_future_key": True}
        settings_path.write_text(json.dumps(data), encoding="utf-8")
        s = load_settings()
        assert s.work_time == 1800
        assert not hasattr(s, "unknown_future_key")

    def test_bad_value_falls_back_per_field(self, settings_path, caplog):
        data = {"work_time": "abc", "break_time": 120, "autostart": "yes"}
        settings_path.write_text(json.dumps(data), encoding="utf-8")
        s = load_settings()
        assert s.work_time == 25 * 60
        assert s.break_time == 120
        assert s.autostart is False
        assert "Ignoring invalid setting work_time" in caplog.text

    def test_numeric_strings_and_nulls(self, settings_path):
        data = {"sound_volume": "40", "window_x": None, "window_y": 12.0,
                "timer_start_sound": 5}
        settings_path.write_text(json.dumps(data), encoding="utf-8")
        s = load_settings()
        assert s.sound_volume == 40
        assert s.window_x is None
        assert s.window_y == 12
        assert s.timer_start_sound == "chime"

    def test_bad_value_does_not_break_engine(self, settings_path, make_engine):
        settings_path.write_text(json.dumps({"work_time": "abc"}), encoding="utf-8")
        engine = make_engine(settings=load_settings())
        assert engine.format_time() == "00:25:00"


# ═══════════════════════════════════════════════════════════════════════
#  SOUND SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════


class TestSoundGeneration:
    """Test that each generator produces valid WAV bytes."""

    @pytest.mark.parametrize("gen_fn", GENERATORS)
    def test_generator_produces_wav(self, gen_fn):
        data = gen_fn()
        assert isinstance(data, bytes)
        assert len(data) > 100
        assert data[:4] == b"RIFF"

    @pytest.mark.parametrize("gen_fn", GENERATORS)
    def test_wav_is_parseable(self, gen_fn):
        with wave.open(io.BytesIO(gen_fn()), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 44100
            assert wf.getnframes() > 0


@pytest.mark.usefixtures("qapp")
class TestSoundManager:
    def test_create(self, tmp_path):
        mgr = SoundManager(Settings(), sounds_dir=tmp_path)
        assert mgr.enabled is True
        assert mgr.volume == 70

    def test_wav_files_generated(self, tmp_path):
        SoundManager(Settings(), sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            path = tmp_path / f"{name}.wav"
            assert path.exists(), f"Missing WAV: {name}"
            assert path.stat().st_size > 100

    def test_existing_files_are_kept(self, tmp_path):
        (tmp_path / "bell.wav").write_bytes(b"custom")
        SoundManager(Settings(), sounds_dir=tmp_path)
        assert (tmp_path / "bell.wav").read_bytes() == b"custom"

    def test_set_volume(self, tmp_path):
        mgr = SoundManager(Settings(), sounds_dir=tmp_path)
        mgr.set_volume(30)
        assert mgr.volume == 30

    def test_set_volume_clamps(self, tmp_path):
        mgr = SoundManager(Settings(), sounds_dir=tmp_path)
        mgr.set_volume(200)
        assert mgr.volume == 100
        mgr.set_volume(-10)
        assert mgr.volume == 0

    def test_enabled_follows_settings(self, tmp_path):
        s = Settings()
        mgr = SoundManager(s, sounds_dir=tmp_path)
        s.play_sounds = False
        assert mgr.enabled is False

    def test_play_by_settings_key(self, tmp_path):
        mgr = SoundManager(Settings(), sounds_dir=tmp_path)
        for key in SOUND_SETTINGS:
            mgr.play(key)  # should not raise

    def test_play_unknown_key_warns(self, tmp_path, caplog):
        mgr = SoundManager(Settings(), sounds_dir=tmp_path)
        mgr.play("timer_lunch_sound")
        assert "Unknown sound setting" in caplog.text

    def test_play_invalid_name_no_crash(self, tmp_path):
        mgr = SoundManager(Settings(), sounds_dir=tmp_path)
        mgr.play_sound("nonexistent_sound")

    def test_play_while_disabled_no_crash(self, tmp_path):
        mgr = SoundManager(Settings(play_sounds=False), sounds_dir=tmp_path)
        mgr.play("timer_start_sound")

    def test_all_sounds_loaded(self, tmp_path):
        mgr = SoundManager(Settings(), sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            assert name in mgr._effects


# ═══════════════════════════════════════════════════════════════════════
#  SETTINGS DIALOG
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestSettingsDialog:
    def test_create(self):
        from pomodoro.ui.settings_dialog import SettingsDialog
        dlg = SettingsDialog(Settings())
        assert dlg.windowTitle() == "Preferences"

    def test_reflects_settings(self):
        from pomodoro.ui.settings_dialog import SettingsDialog
        s = Settings(work_time=30 * 60, sound_volume=50, break_time_percentage=15,
                     timer_break_sound="click")
        dlg = SettingsDialog(s)
        assert dlg._work_spin.value() == 30
        assert dlg._vol_slider.value() == 50
        assert dlg._percentage_spin.value() == 15
        assert dlg._sound_combos["timer_break_sound"].currentData() == "click"

    def test_populating_does_not_save(self, settings_path):
        from pomodoro.ui.settings_dialog import SettingsDialog
        SettingsDialog(Settings())
        assert not settings_path.exists()

    def test_changes_update_settings(self, settings_path):
        from pomodoro.ui.settings_dialog import SettingsDialog
        s = Settings()
        dlg = SettingsDialog(s)
        dlg._work_spin.setValue(45)
        dlg._sessions_spin.setValue(3)
        assert s.work_time == 45 * 60
        assert s.sessions_long_break == 3
        assert load_settings().work_time == 45 * 60

    def test_volume_slider_updates_label(self):
        from pomodoro.ui.settings_dialog import SettingsDialog
        s = Settings()
        dlg = SettingsDialog(s)
        dlg._vol_slider.setValue(85)
        assert dlg._vol_label.text() == "85%"
        assert s.sound_volume == 85

    def test_checkbox_toggles(self):
        from pomodoro.ui.settings_dialog import SettingsDialog
        s = Settings()
        dlg = SettingsDialog(s)
        dlg._autostart_cb.setChecked(True)
        dlg._background_cb.setChecked(False)
        assert s.autostart is True
        assert s.run_in_background is False

    def test_sound_choice(self):
        from pomodoro.ui.settings_dialog import SettingsDialog
        s = Settings()
        dlg = SettingsDialog(s)
        combo = dlg._sound_combos["timer_finish_sound"]
        combo.setCurrentIndex(combo.findData("double_tap"))
        assert s.timer_finish_sound == "double_tap"

    def test_sound_preview_callback(self):
        from pomodoro.ui.settings_dialog import SettingsDialog
        calls: list[bool] = []
        dlg = SettingsDialog(Settings(), sound_preview_callback=lambda: calls.append(True))
        dlg._on_volume_released()
        assert len(calls) == 1
