from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List

from .types import Dot
from .utils import clamp


DOT_LIFETIME_MS = 30_000.0
MIN_OPACITY = 0.1


@dataclass(frozen=True)
class DotAppearance:
    radius: float
    opacity: float


def dot_appearance(dot: Dot, now: float, lifetime_ms: float = DOT_LIFETIME_MS) -> DotAppearance:
    elapsed = now - dot.created_at
    progress = clamp(elapsed / lifetime_ms, 0.0, 1.0) if lifetime_ms > 0 else 1.0

    pulse = 0.8 + 0.2 * math.sin(progress * 2.0 * math.pi)
    radius = dot.initial_radius * min(pulse, 1.0)
    opacity = 1.0 - progress * (1.0 - MIN_OPACITY)
    return DotAppearance(radius=radius, opacity=opacity)


class ParticleField:
    """
    Append-only set of dots, pruned by age.

    ``tick`` rebinds the backing list instead of mutating it, so a list it
    returned stays valid while new dots are appended.
    """

    def __init__(self, lifetime_ms: float = DOT_LIFETIME_MS) -> None:
        self.lifetime_ms = float(lifetime_ms)
        self._dots: List[Dot] = []

    def append(self, dot: Dot) -> None:
        self._dots.append(dot)

    def tick(self, now: float) -> List[Dot]:
        self._dots = [d for d in self._dots if now - d.created_at < self.lifetime_ms]
        return list(self._dots)

    def appearance(self, dot: Dot, now: float) -> DotAppearance:
        return dot_appearance(dot, now, self.lifetime_ms)

    def clear(self) -> None:
        self._dots = []

    def __len__(self) -> int:
        return len(self._dots)

    def __iter__(self) -> Iterator[Dot]:
        return iter(list(self._dots))
