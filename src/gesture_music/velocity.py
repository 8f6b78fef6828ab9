from __future__ import annotations

import math
from typing import Optional

from .types import Position
from .utils import clamp


BASE_RADIUS = 4.0
MAX_RADIUS = 40.0
VELOCITY_EXPONENT = 1.2
RADIUS_GAIN = 2.0


def estimate_radius(
    current: Position,
    previous: Optional[Position],
    *,
    base_radius: float = BASE_RADIUS,
    max_radius: float = MAX_RADIUS,
) -> float:
    if previous is None:
        velocity = 1.0
    else:
        distance = math.hypot(current.x - previous.x, current.y - previous.y)
        # log keeps big jumps from exploding the dot size
        velocity = math.log(distance + 1.0)

    radius = base_radius + (velocity ** VELOCITY_EXPONENT) * RADIUS_GAIN
    return clamp(radius, base_radius, max_radius)


class VelocityEstimator:
    """Sizes dots from how far the gesture moved since the last accepted position."""

    def __init__(self, *, base_radius: float = BASE_RADIUS, max_radius: float = MAX_RADIUS) -> None:
        self.base_radius = base_radius
        self.max_radius = max_radius
        self.previous: Optional[Position] = None

    def estimate(self, current: Position) -> float:
        radius = estimate_radius(current, self.previous, base_radius=self.base_radius, max_radius=self.max_radius)
        self.previous = current
        return radius

    def reset(self) -> None:
        self.previous = None
