from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .gate import MIN_INTERVAL_MS
from .particles import DOT_LIFETIME_MS
from .render import DEFAULT_FPS, WASH_ALPHA
from .sources import INDEX_FINGER_TIP
from .velocity import BASE_RADIUS, MAX_RADIUS
from .voices import EIGHTH_NOTE_MS, REVERB_DECAY_S, REVERB_WET


@dataclass
class InstrumentConfig:
    scale: str = "default"
    min_interval_ms: float = MIN_INTERVAL_MS
    dot_lifetime_ms: float = DOT_LIFETIME_MS
    base_radius: float = BASE_RADIUS
    max_radius: float = MAX_RADIUS


@dataclass
class RenderConfig:
    width: int = 1280
    height: int = 720
    fps: float = DEFAULT_FPS
    wash_alpha: float = WASH_ALPHA
    preview_width: int = 192  # camera thumbnail, 0 hides it


@dataclass
class AudioConfig:
    sample_rate: int = 44100
    volume: float = 0.3
    note_ms: float = EIGHTH_NOTE_MS
    reverb_decay_s: float = REVERB_DECAY_S
    reverb_wet: float = REVERB_WET
    device: Optional[int] = None


@dataclass
class CameraConfig:
    index: int = 0
    width: int = 1280  # capture size, best effort
    height: int = 720
    max_hands: int = 1
    mirror: bool = True
    landmark_index: int = INDEX_FINGER_TIP
    tasks_model: str = "models/hand_landmarker.task"


@dataclass
class AppConfig:
    instrument: InstrumentConfig = field(default_factory=InstrumentConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    use_camera: bool = True
    window_name: str = "gesture music"
