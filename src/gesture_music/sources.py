from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Protocol, Tuple

import numpy as np

from .scheduling import RepeatingTask
from .types import GateResult, HandPosition, Position, SupportsSize, monotonic_ms


logger = logging.getLogger(__name__)

INDEX_FINGER_TIP = 8

Submit = Callable[[Position, float], GateResult]


class SupportsDetect(Protocol):
    def detect(self, frame_bgr) -> List[HandPosition]:
        ...


def landmark_to_canvas(
    x: float,
    y: float,
    video_size: Tuple[int, int],
    canvas_size: Tuple[int, int],
    *,
    mirror: bool = True,
) -> Optional[Position]:
    """
    Convert a landmark from video pixels to canvas pixels.

    X is mirrored by default so the canvas matches a selfie-style preview.
    Returns None when either size is degenerate.
    """

    video_w, video_h = video_size
    canvas_w, canvas_h = canvas_size
    if video_w <= 0 or video_h <= 0 or canvas_w <= 0 or canvas_h <= 0:
        return None

    cx = x * (canvas_w / video_w)
    cy = y * (canvas_h / video_h)
    if mirror:
        cx = canvas_w - cx
    return Position(cx, cy)


class PointerSource:
    """One submission per click, coordinates already relative to the canvas."""

    def __init__(self, submit: Submit, *, clock: Callable[[], float] = monotonic_ms) -> None:
        self._submit = submit
        self._clock = clock

    def click(self, x: float, y: float) -> GateResult:
        return self._submit(Position(float(x), float(y)), self._clock())


class DetectorSource:
    """
    Best-effort per-frame hand detection feeding the instrument.

    Camera reads and inference run in a worker thread; the submission itself
    always happens on the loop thread.
    """

    def __init__(
        self,
        detector: SupportsDetect,
        read_frame: Callable[[], Optional[np.ndarray]],
        submit: Submit,
        canvas: SupportsSize,
        *,
        clock: Callable[[], float] = monotonic_ms,
        landmark_index: int = INDEX_FINGER_TIP,
        mirror: bool = True,
        interval_s: float = 0.0,
    ) -> None:
        self._detector = detector
        self._read_frame = read_frame
        self._submit = submit
        self._canvas = canvas
        self._clock = clock
        self.landmark_index = landmark_index
        self.mirror = mirror
        self.last_frame: Optional[np.ndarray] = None
        self.last_hands: List[HandPosition] = []
        self.failures = 0
        self._task = RepeatingTask(self.step, interval_s=interval_s, name="detect")

    async def step(self) -> Optional[Position]:
        try:
            frame = await asyncio.to_thread(self._read_frame)
            if frame is None:
                return None
            hands = await asyncio.to_thread(self._detector.detect, frame)
        except Exception:
            # Detection is best-effort: drop this frame, keep the loop alive.
            self.failures += 1
            logger.warning("hand detection failed; skipping frame", exc_info=True)
            return None
        self.last_frame = frame
        self.last_hands = hands
        h, w = frame.shape[:2]
        return self.handle_hands(hands, (w, h), self._clock())

    def handle_hands(self, hands: List[HandPosition], video_size: Tuple[int, int], now: float) -> Optional[Position]:
        if not hands:
            return None
        landmarks = hands[0].landmarks
        if self.landmark_index >= len(landmarks):
            return None

        lm = landmarks[self.landmark_index]
        position = landmark_to_canvas(
            lm.x_px,
            lm.y_px,
            video_size,
            (self._canvas.width, self._canvas.height),
            mirror=self.mirror,
        )
        if position is None:
            logger.debug("skipping landmark: video %s or canvas has no area", video_size)
            return None
        self._submit(position, now)
        return position

    def tracked_point(self) -> Optional[Tuple[int, int]]:
        """The tracked landmark of the first hand in the last frame, in video pixels."""
        if not self.last_hands:
            return None
        landmarks = self.last_hands[0].landmarks
        if self.landmark_index >= len(landmarks):
            return None
        lm = landmarks[self.landmark_index]
        return lm.x_px, lm.y_px

    @property
    def running(self) -> bool:
        return self._task.running

    def start(self) -> None:
        self._task.start()

    def stop(self) -> None:
        self._task.stop()

    async def join(self) -> None:
        await self._task.join()
