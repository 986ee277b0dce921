"""Sound synthesis and playback using numpy + QSoundEffect.

All sounds are generated programmatically as WAV files using sine-wave
synthesis with ADSR envelopes.  Files are cached to disk so subsequent
app launches are instant.

The timer asks for sounds by *settings key* (``timer_start_sound``,
``timer_break_sound``, ``timer_finish_sound``); the key holds the name
of the sound the user picked in preferences.

Sound names
-----------
- ``chime``        short ascending chime (3 notes)
- ``achievement``  bright arpeggio
- ``bell``         soft meditation bell
- ``double_tap``   gentle double-tap
- ``click``        subtle click, used for volume preview
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / ".config" / "Pomodoro"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "chime",
    "achievement",
    "bell",
    "double_tap",
    "click",
)

SOUND_SETTINGS = (
    "timer_start_sound",
    "timer_break_sound",
    "timer_finish_sound",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════════


def _samples(seconds: float) -> int:
    return int(SAMPLE_RATE * seconds)


def _envelope(
    n: int,
    attack: float,
    decay: float,
    sustain: float,
    release: float,
) -> np.ndarray:
    """Piecewise-linear ADSR gain curve; stage lengths in seconds."""
    a = min(_samples(attack), n)
    d = min(a + _samples(decay), n)
    r = max(n - _samples(release), d)
    points = [0, a, d, r, n]
    gains = [0.0, 1.0, sustain, sustain, 0.0]
    return np.interp(np.arange(n), points, gains)


def _note(
    freq: float,
    seconds: float,
    amplitude: float = 0.5,
    *,
    attack: float = 0.002,
    decay: float = 0.005,
    sustain: float = 0.3,
    release: float = 0.005,
    overtone: float = 0.0,
) -> np.ndarray:
    """One enveloped sine tone, optionally with an octave overtone."""
    t = np.arange(_samples(seconds)) / SAMPLE_RATE
    wave_ = np.sin(2 * np.pi * freq * t)
    if overtone:
        wave_ = wave_ + overtone * np.sin(4 * np.pi * freq * t)
    return amplitude * wave_ * _envelope(len(t), attack, decay, sustain, release)


def _rest(seconds: float) -> np.ndarray:
    return np.zeros(_samples(seconds))


def _sequence(*parts: np.ndarray) -> np.ndarray:
    return np.concatenate(parts)


def _wav(samples: np.ndarray) -> bytes:
    """Mono 16-bit PCM WAV bytes from floats in -1..1."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


def _arpeggio(freqs: list[float], step: float, gap: float, ring: float) -> np.ndarray:
    """Rising notes; the last one rings out for *ring* seconds."""
    parts: list[np.ndarray] = []
    for freq in freqs[:-1]:
        parts += [_note(freq, step), _rest(gap)]
    parts.append(_note(freqs[-1], ring, sustain=0.5, decay=0.007, release=0.014))
    return _sequence(*parts)


# ═══════════════════════════════════════════════════════════════════════════
#  SOUNDS
# ═══════════════════════════════════════════════════════════════════════════

C5, E5, G5, C6 = 523.25, 659.25, 783.99, 1046.50


def _generate_chime() -> bytes:
    """Timer start: C5, E5, G5."""
    return _wav(_sequence(_arpeggio([C5, E5, G5], 0.12, 0.03, 0.2), _rest(0.05)))


def _generate_achievement() -> bytes:
    """Cycle finished: C5, E5, G5, C6 with a held top note."""
    return _wav(_arpeggio([C5, E5, G5, C6], 0.10, 0.02, 0.35))


def _generate_bell() -> bytes:
    """Break start: A4 with a faint octave, slow attack and long decay."""
    return _wav(_note(
        440.0, 1.0, 0.35,
        attack=0.08, decay=0.3, sustain=0.25, release=0.55, overtone=0.23,
    ))


def _generate_double_tap() -> bytes:
    """Two short 800 Hz taps, 80 ms apart."""
    tap = _note(800.0, 0.04, 0.35, sustain=0.2)
    return _wav(_sequence(tap, _rest(0.08), tap, _rest(0.05)))


def _generate_click() -> bytes:
    """Very short high tick, padded so QSoundEffect doesn't clip it."""
    tick = _note(1200.0, 0.015, 0.2, attack=0.0005, decay=0.001, sustain=0.0, release=0.0)
    return _wav(_sequence(tick, _rest(0.03)))


_GENERATORS: dict[str, callable] = {
    "chime": _generate_chime,
    "achievement": _generate_achievement,
    "bell": _generate_bell,
    "double_tap": _generate_double_tap,
    "click": _generate_click,
}



# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Manages sound synthesis, caching, and playback.

    Usage::

        mgr = SoundManager(settings, parent=self)
        mgr.play("timer_start_sound")   # by settings key
        mgr.play_sound("click")         # by sound name
    """

    def __init__(
        self,
        settings,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()
        self.set_volume(settings.sound_volume)

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def play(self, sound_settings: str) -> None:
        """Play the sound selected under the settings key *sound_settings*."""
        name = getattr(self._settings, sound_settings, None)
        if name is None:
            logger.warning("Unknown sound setting %r", sound_settings)
            return
        self.play_sound(name)

    def play_sound(self, name: str) -> None:
        """Play a sound by name.  No-op if disabled or name unknown."""
        if not self.enabled:
            return
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("No sound named %r", name)
            return
        effect.play()

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return bool(self._settings.play_sounds)

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, gen_fn in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(gen_fn())

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
