"""Cue synthesis and playback using numpy + QSoundEffect.

Cues are generated programmatically as WAV files using sine-wave
synthesis with attack/exponential-decay envelopes.  Files are cached
to disk so subsequent launches are instant.

Cue kinds
---------
- ``beep``   — short high ping (1200 Hz, 0.1 s)
- ``finish`` — phase-change bell (2000 Hz, sharp attack, 1.5 s decay)
  layered with a fifth above (3000 Hz) that fades in 0.5 s

Nothing is loaded until ``initialize()`` is called from a user action
(the Start button).  Until then, and whenever audio is unavailable,
``play`` is silently a no-op: the workout never depends on sound.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..storage.db import APP_SUPPORT_DIR
from ..timer.models import CueKind

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SAMPLE_RATE = 44100
SILENCE_FLOOR = 0.001  # exponential ramps end here, like a WebAudio ramp


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _decay_envelope(
    length: int,
    peak: float,
    attack: int = 0,
    decay_end: int | None = None,
) -> np.ndarray:
    """Linear attack to *peak*, then exponential decay to the floor.

    All durations are in samples; *decay_end* defaults to *length*.
    """
    env = np.zeros(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, peak, a, endpoint=False)
    end = min(decay_end if decay_end is not None else length, length)
    if end > a:
        steps = np.linspace(0.0, 1.0, end - a)
        env[a:end] = peak * (SILENCE_FLOOR / peak) ** steps
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_beep() -> bytes:
    """Short high ping — 1200 Hz from 0.05 down to silence in 0.1 s."""
    tone = _sine(1200.0, 0.1)
    return _to_wav_bytes(tone * _decay_envelope(len(tone), peak=0.05))


def _generate_finish() -> bytes:
    """Bell chime: 2000 Hz fundamental plus a fifth that dies out early."""
    duration = 1.5
    attack = int(SAMPLE_RATE * 0.01)

    base = _sine(2000.0, duration)
    base_env = _decay_envelope(len(base), peak=0.3, attack=attack)

    overtone = _sine(2000.0 * 1.5, duration)
    overtone_env = _decay_envelope(
        len(overtone),
        peak=0.1,
        attack=attack,
        decay_end=int(SAMPLE_RATE * 0.5),
    )
    return _to_wav_bytes(base * base_env + overtone * overtone_env)


_GENERATORS: dict[CueKind, Callable[[], bytes]] = {
    CueKind.BEEP: _generate_beep,
    CueKind.FINISH: _generate_finish,
}


# ═══════════════════════════════════════════════════════════════════════════
#  CUE PLAYER
# ═══════════════════════════════════════════════════════════════════════════


class SoundCuePlayer(QObject):
    """Synthesises, caches and plays the phase cues.

    Usage::

        player = SoundCuePlayer(parent=self)
        player.initialize()          # from a click handler
        player.play(CueKind.FINISH)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[CueKind, QSoundEffect] = {}

    # ── public API ────────────────────────────────────────────────────

    def initialize(self) -> None:
        """Prepare playback.  Call from a user gesture; safe to repeat.

        Repeated calls reload any cue that failed or went missing.
        Failures are logged and leave the player silent.
        """
        try:
            self._ensure_wav_files()
            self._load_effects()
        except Exception:
            logger.warning("Audio unavailable; cues disabled", exc_info=True)

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, kind: CueKind) -> None:
        """Play a cue.  No-op if disabled, uninitialised or unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(kind)
        if effect is None:
            return
        try:
            effect.play()
        except Exception:
            logger.warning("Failed to play %s cue", kind.value, exc_info=True)

    @property
    def initialized(self) -> bool:
        return bool(self._effects)

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _wav_path(self, kind: CueKind) -> Path:
        return self._sounds_dir / f"{kind.value}.wav"

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for kind, gen_fn in _GENERATORS.items():
            path = self._wav_path(kind)
            if not path.exists():
                path.write_bytes(gen_fn())

    def _load_effects(self) -> None:
        """Create QSoundEffect instances for cues not yet usable."""
        for kind in CueKind:
            current = self._effects.get(kind)
            if current is not None and current.status() != QSoundEffect.Status.Error:
                continue
            path = self._wav_path(kind)
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[kind] = effect
