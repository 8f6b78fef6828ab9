from .gate import TriggerGate, UnlockHandshake, UnlockState
from .instrument import GestureInstrument
from .particles import ParticleField
from .types import Accepted, Channel, Dot, PlayEvent, Position, RejectReason, Rejected
from .velocity import VelocityEstimator

__all__ = [
    "Accepted",
    "Channel",
    "Dot",
    "GestureInstrument",
    "ParticleField",
    "PlayEvent",
    "Position",
    "RejectReason",
    "Rejected",
    "TriggerGate",
    "UnlockHandshake",
    "UnlockState",
    "VelocityEstimator",
]
