from __future__ import annotations

import math
import re
from typing import Dict, Tuple

from .types import Channel, HslColor


DEFAULT_SCALE: Tuple[str, ...] = (
    "C4", "D4", "E4", "F4", "G4", "A4", "B4",
    "C5", "D5", "E5", "F5", "G5", "A5", "C6",
)

# Named scales, low to high.
SCALES: Dict[str, Tuple[str, ...]] = {
    "default": DEFAULT_SCALE,
    "c_major": ("C4", "D4", "E4", "F4", "G4", "A4", "B4", "C5"),
    "c_minor": ("C4", "D4", "D#4", "F4", "G4", "G#4", "A#4", "C5"),
    "pentatonic": ("C4", "D4", "E4", "G4", "A4", "C5"),
    "blues": ("C4", "D#4", "F4", "F#4", "G4", "A#4", "C5"),
    "chromatic": ("C4", "C#4", "D4", "D#4", "E4", "F4", "F#4", "G4", "G#4", "A4", "A#4", "B4", "C5"),
}

HUE_LOW = 20.0
HUE_HIGH = 240.0

_PITCH_CLASSES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
_NOTE_RE = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)$")


def get_scale(name: str) -> Tuple[str, ...]:
    if name not in SCALES:
        raise ValueError(f"Unknown scale '{name}'. Available: {list(SCALES.keys())}")
    return SCALES[name]


def map_position(y: float, canvas_height: float, n: int) -> int:
    """
    Map a vertical canvas coordinate to a scale index.

    The axis is inverted so the bottom of the canvas is the lowest note.
    Out-of-range results are clamped into ``[0, n)``; a zero-height canvas maps to 0.
    """

    if canvas_height <= 0 or n <= 0:
        return 0
    raw = math.floor(((canvas_height - y) / canvas_height) * n)
    return max(0, min(raw, n - 1))


def map_channel(x: float, canvas_width: float) -> Channel:
    return Channel.LEFT if x < canvas_width / 2 else Channel.RIGHT


def color_for_index(index: int, n: int) -> HslColor:
    if n <= 1:
        return HslColor(hue=HUE_LOW)
    return HslColor(hue=HUE_LOW + (HUE_HIGH - HUE_LOW) * (index / (n - 1)))


def note_to_midi(note: str) -> int:
    """Convert a scientific pitch name such as ``"C4"`` or ``"F#5"`` to a MIDI number."""
    m = _NOTE_RE.match(note.strip())
    if m is None:
        raise ValueError(f"Invalid note name: {note!r}")
    letter, accidental, octave = m.groups()
    semitone = _PITCH_CLASSES[letter.upper()]
    if accidental == "#":
        semitone += 1
    elif accidental == "b":
        semitone -= 1
    return 12 * (int(octave) + 1) + semitone


def midi_to_freq(midi_note: int) -> float:
    """Convert MIDI note number to frequency in Hz."""
    return 440.0 * (2.0 ** ((midi_note - 69) / 12.0))


def note_to_freq(note: str) -> float:
    return midi_to_freq(note_to_midi(note))
