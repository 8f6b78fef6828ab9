from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from .particles import ParticleField
from .scheduling import RepeatingTask
from .types import BGR, monotonic_ms


logger = logging.getLogger(__name__)

WHITE: BGR = (255, 255, 255)
WASH_ALPHA = 0.065
DEFAULT_FPS = 60.0


class CanvasSurface:
    """
    2D drawing surface backed by a float32 BGR buffer.

    Float storage lets repeated low-alpha washes converge to the wash color
    instead of stalling on uint8 rounding.
    """

    def __init__(self, width: int, height: int, background: BGR = WHITE) -> None:
        self.background = background
        self._pixels = self._blank(width, height)

    def _blank(self, width: int, height: int) -> np.ndarray:
        w = max(0, int(width))
        h = max(0, int(height))
        pixels = np.empty((h, w, 3), dtype=np.float32)
        pixels[:] = self.background
        return pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def resize(self, width: int, height: int) -> None:
        if (int(width), int(height)) == self.size:
            return
        # Resizing clears, like a browser canvas.
        self._pixels = self._blank(width, height)
        logger.debug("canvas resized to %dx%d", self.width, self.height)

    def wash(self, color: BGR, alpha: float) -> None:
        if self._pixels.size == 0 or alpha <= 0:
            return
        alpha = min(float(alpha), 1.0)
        self._pixels *= 1.0 - alpha
        self._pixels += np.asarray(color, dtype=np.float32) * alpha

    def fill_circle(self, center: Tuple[float, float], radius: float, color: BGR, opacity: float = 1.0) -> None:
        if self._pixels.size == 0 or radius <= 0 or opacity <= 0:
            return

        cx = int(round(center[0]))
        cy = int(round(center[1]))
        r = int(math.ceil(radius))
        x0 = max(0, cx - r - 1)
        y0 = max(0, cy - r - 1)
        x1 = min(self.width, cx + r + 2)
        y1 = min(self.height, cy + r + 2)
        if x0 >= x1 or y0 >= y1:
            return

        mask = np.zeros((y1 - y0, x1 - x0), dtype=np.uint8)
        cv2.circle(mask, (cx - x0, cy - y0), max(1, int(round(radius))), 255, -1, lineType=cv2.LINE_AA)
        a = (mask.astype(np.float32) / 255.0)[..., None] * min(float(opacity), 1.0)

        roi = self._pixels[y0:y1, x0:x1]
        roi *= 1.0 - a
        roi += a * np.asarray(color, dtype=np.float32)

    def image(self) -> np.ndarray:
        """uint8 BGR copy for display."""
        return np.clip(np.rint(self._pixels), 0, 255).astype(np.uint8)


class RenderLoop:
    """
    Redraws the particle field every frame.

    Old strokes are never erased explicitly: a translucent wash over the whole
    canvas makes them fade into a trail.
    """

    def __init__(
        self,
        surface: CanvasSurface,
        field: ParticleField,
        *,
        clock: Callable[[], float] = monotonic_ms,
        fps: float = DEFAULT_FPS,
        wash_alpha: float = WASH_ALPHA,
        wash_color: BGR = WHITE,
        present: Optional[Callable[[CanvasSurface], None]] = None,
    ) -> None:
        self.surface = surface
        self.field = field
        self.clock = clock
        self.wash_alpha = wash_alpha
        self.wash_color = wash_color
        self.present = present
        self._task = RepeatingTask(self.draw_frame, interval_s=1.0 / fps if fps > 0 else 0.0, name="render")

    def draw_frame(self, now: Optional[float] = None) -> None:
        if now is None:
            now = self.clock()

        self.surface.wash(self.wash_color, self.wash_alpha)
        for dot in self.field.tick(now):
            look = self.field.appearance(dot, now)
            self.surface.fill_circle((dot.x, dot.y), look.radius, dot.color.to_bgr(), look.opacity)

        if self.present is not None:
            self.present(self.surface)

    @property
    def running(self) -> bool:
        return self._task.running

    @property
    def frames(self) -> int:
        return self._task.iterations

    def start(self) -> None:
        self._task.start()

    def stop(self) -> None:
        self._task.stop()

    async def join(self) -> None:
        await self._task.join()
