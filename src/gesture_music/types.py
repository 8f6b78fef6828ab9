from __future__ import annotations

import colorsys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple, Union


Point2 = Tuple[int, int]
BGR = Tuple[int, int, int]


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class Position:
    """A point in canvas pixel space."""

    x: float
    y: float


class Channel(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class HslColor:
    hue: float  # degrees
    saturation: float = 100.0  # percent
    lightness: float = 60.0  # percent

    def to_bgr(self) -> BGR:
        r, g, b = colorsys.hls_to_rgb((self.hue % 360.0) / 360.0, self.lightness / 100.0, self.saturation / 100.0)
        return (int(round(b * 255)), int(round(g * 255)), int(round(r * 255)))

    def css(self) -> str:
        return f"hsl({self.hue:g}, {self.saturation:g}%, {self.lightness:g}%)"


@dataclass(frozen=True)
class PlayEvent:
    pitch_index: int
    note: str
    channel: Channel
    color: HslColor
    position: Position
    timestamp: float  # ms


@dataclass(frozen=True)
class Dot:
    """A single decaying marker left by one accepted gesture."""

    x: float
    y: float
    initial_radius: float
    color: HslColor
    created_at: float  # ms


class RejectReason(Enum):
    RATE_LIMITED = "rate_limited"
    AUDIO_NOT_READY = "audio_not_ready"


@dataclass(frozen=True)
class Accepted:
    event: PlayEvent

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason

    @property
    def accepted(self) -> bool:
        return False


GateResult = Union[Accepted, Rejected]


class SupportsSize(Protocol):
    width: int
    height: int


class AudioSink(Protocol):
    async def unlock(self) -> None:
        ...

    def trigger(self, note: str, channel: Channel) -> None:
        ...


@dataclass(frozen=True)
class HandLandmark:
    """A single hand landmark with both normalized and pixel coordinates."""

    idx: int
    x_norm: float
    y_norm: float
    z_norm: float
    x_px: int
    y_px: int


@dataclass(frozen=True)
class HandPosition:
    """Detected landmarks for a single hand."""

    handedness_label: Optional[str]  # "Left" / "Right" (may be None)
    handedness_score: Optional[float]
    landmarks: List[HandLandmark]  # length 21
    fingertips_px: Dict[str, Point2]  # thumb/index/middle/ring/pinky
