from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .types import Channel


EIGHTH_NOTE_MS = 250.0  # "8n" at 120 bpm

# --- Lead ("Synth", left half) ---
LEAD_ATTACK_MS = 5.0
LEAD_DECAY_MS = 420.0
LEAD_HARMONICS = 7  # odd harmonics -> triangle-ish

# --- Mono ("MonoSynth", right half) ---
MONO_ATTACK_MS = 12.0
MONO_DECAY_MS = 300.0
MONO_HARMONICS = 16
MONO_LPF_HZ = 1800.0
MONO_DRIVE = 1.3

# --- Reverb ---
REVERB_DECAY_S = 2.0
REVERB_WET = 0.5
REVERB_COMB_MS = (29.7, 37.1, 41.1, 43.7)


@dataclass
class _Voice:
    freq: float
    phase: float
    pos: int
    length: int
    attack: int
    decay: int
    sample_rate: int
    done: bool = False

    def _wave(self, phase: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def render(self, t_idx: np.ndarray) -> Optional[np.ndarray]:
        if self.done:
            return None
        remaining = self.length - self.pos
        if remaining <= 0:
            self.done = True
            return None

        n = int(min(t_idx.size, remaining))
        tt = t_idx[:n]
        inc = (2.0 * np.pi * float(self.freq)) / float(self.sample_rate)
        wave = self._wave(self.phase + inc * tt)

        s = (self.pos + tt).astype(np.float64)
        env = np.clip(s / float(self.attack), 0.0, 1.0) * np.exp(-s / float(self.decay))

        self.phase = float((self.phase + inc * float(n)) % (2.0 * np.pi))
        self.pos += n
        if self.pos >= self.length:
            self.done = True

        y = wave * env
        if n < t_idx.size:
            out = np.zeros((t_idx.size,), dtype=np.float64)
            out[:n] = y
            return out
        return y


@dataclass
class LeadVoice(_Voice):
    def _wave(self, phase: np.ndarray) -> np.ndarray:
        wave = np.zeros(phase.shape, dtype=np.float64)
        for i in range(LEAD_HARMONICS):
            k = 2 * i + 1
            wave += ((-1.0) ** i) * np.sin(phase * k) / float(k * k)
        return wave * (8.0 / (np.pi ** 2))


@dataclass
class MonoVoice(_Voice):
    def _wave(self, phase: np.ndarray) -> np.ndarray:
        # Band-limited saw with each harmonic weighted by a one-pole low-pass response.
        nyquist = self.sample_rate / 2.0
        wave = np.zeros(phase.shape, dtype=np.float64)
        for k in range(1, MONO_HARMONICS + 1):
            f = self.freq * k
            if f >= nyquist:
                break
            gain = 1.0 / np.sqrt(1.0 + (f / MONO_LPF_HZ) ** 2)
            wave += gain * np.sin(phase * float(k)) / float(k)
        return np.tanh(wave * (2.0 / np.pi) * MONO_DRIVE)


def create_voice(freq: float, channel: Channel, sample_rate: int, note_ms: float = EIGHTH_NOTE_MS) -> _Voice:
    if channel is Channel.LEFT:
        cls, attack_ms, decay_ms = LeadVoice, LEAD_ATTACK_MS, LEAD_DECAY_MS
    else:
        cls, attack_ms, decay_ms = MonoVoice, MONO_ATTACK_MS, MONO_DECAY_MS
    # Let the tail ring out past the nominal note length.
    length = max(1, int(sample_rate * ((note_ms + 3.0 * decay_ms) / 1000.0)))
    return cls(
        freq=float(freq),
        phase=0.0,
        pos=0,
        length=length,
        attack=max(1, int(sample_rate * (attack_ms / 1000.0))),
        decay=max(1, int(sample_rate * (decay_ms / 1000.0))),
        sample_rate=sample_rate,
    )


class CombReverb:
    """Parallel feedback comb filters; keeps its history across blocks."""

    def __init__(
        self,
        sample_rate: int,
        decay_s: float = REVERB_DECAY_S,
        wet: float = REVERB_WET,
        comb_ms=REVERB_COMB_MS,
    ) -> None:
        self.wet = max(0.0, min(1.0, wet))
        self.delays = [max(1, int(sample_rate * ms / 1000.0)) for ms in comb_ms]
        # Feedback for a 60 dB drop after decay_s.
        self.gains = [10.0 ** (-3.0 * d / (max(decay_s, 1e-3) * sample_rate)) for d in self.delays]
        self._history = [np.zeros(d, dtype=np.float64) for d in self.delays]

    def process(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        if self.wet <= 0 or x.size == 0:
            return x
        tail = np.zeros_like(x)
        for i, (d, g) in enumerate(zip(self.delays, self.gains)):
            hist = self._history[i]
            start = 0
            while start < x.size:
                m = min(d, x.size - start)
                y = x[start : start + m] + g * hist[:m]
                hist = np.concatenate([hist[m:], y])
                tail[start : start + m] += y
                start += m
            self._history[i] = hist
        tail /= float(len(self.delays))
        return (1.0 - self.wet) * x + self.wet * tail


class VoiceBank:
    """Mixes the active voices block by block, then applies the reverb."""

    def __init__(self, sample_rate: int, volume: float = 0.3, reverb: Optional[CombReverb] = None) -> None:
        self.sample_rate = sample_rate
        self.volume = max(0.0, min(1.0, volume))
        self.reverb = reverb
        self._voices: List[_Voice] = []

    @property
    def active(self) -> int:
        return len(self._voices)

    def add(self, voice: _Voice) -> None:
        self._voices.append(voice)

    def render(self, frames: int) -> np.ndarray:
        out = np.zeros(frames, dtype=np.float64)
        if self._voices:
            t_idx = np.arange(frames, dtype=np.float64)
            keep: List[_Voice] = []
            for v in self._voices:
                y = v.render(t_idx)
                if y is not None:
                    out += y
                if not v.done:
                    keep.append(v)
            self._voices = keep
        if self.reverb is not None:
            out = self.reverb.process(out)
        return np.clip(out * self.volume, -1.0, 1.0).astype(np.float32)
