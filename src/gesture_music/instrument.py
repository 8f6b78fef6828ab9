from __future__ import annotations

import logging

from .gate import TriggerGate
from .particles import ParticleField
from .types import Accepted, Dot, GateResult, Position
from .velocity import VelocityEstimator


logger = logging.getLogger(__name__)


class GestureInstrument:
    """
    Single entry point shared by every position source.

    Accepted gestures play a note (through the gate) and leave a dot sized by
    the gesture velocity. Rejected ones leave no trace.
    """

    def __init__(self, gate: TriggerGate, velocity: VelocityEstimator, field: ParticleField) -> None:
        self.gate = gate
        self.velocity = velocity
        self.field = field

    def submit(self, position: Position, now: float) -> GateResult:
        result = self.gate.submit(position, now)
        if not isinstance(result, Accepted):
            return result

        event = result.event
        radius = self.velocity.estimate(position)
        self.field.append(
            Dot(
                x=position.x,
                y=position.y,
                initial_radius=radius,
                color=event.color,
                created_at=now,
            )
        )
        logger.debug(
            "play %s on %s at (%.1f, %.1f) r=%.1f",
            event.note,
            event.channel.value,
            position.x,
            position.y,
            radius,
        )
        return result
