import asyncio

import pytest

from conftest import unlock
from gesture_music.gate import TriggerGate
from gesture_music.instrument import GestureInstrument
from gesture_music.particles import ParticleField
from gesture_music.types import Position, RejectReason
from gesture_music.velocity import VelocityEstimator


def build(sink, size):
    gate = TriggerGate(sink, size)
    return GestureInstrument(gate, VelocityEstimator(), ParticleField())


def test_locked_instrument_leaves_no_trace(sink, size):
    async def scenario():
        inst = build(sink, size)
        result = inst.submit(Position(50, 50), 0.0)
        assert result.reason is RejectReason.AUDIO_NOT_READY
        await inst.gate.handshake.wait()
        assert len(inst.field) == 0
        assert inst.velocity.previous is None
        assert sink.triggers == []

    asyncio.run(scenario())


def test_accepted_gesture_plays_and_drops_a_dot(sink, size):
    async def scenario():
        inst = build(sink, size)
        await unlock(inst.gate)
        result = inst.submit(Position(50, 0), 1000.0)
        assert result.accepted
        (dot,) = inst.field.tick(1000.0)
        assert (dot.x, dot.y) == (50, 0)
        assert dot.created_at == 1000.0
        assert dot.color == result.event.color
        assert dot.initial_radius == pytest.approx(6.0)
        assert len(sink.triggers) == 1

    asyncio.run(scenario())


def test_rate_limited_gesture_is_dropped(sink, size):
    async def scenario():
        inst = build(sink, size)
        await unlock(inst.gate)
        inst.submit(Position(50, 50), 1000.0)
        result = inst.submit(Position(400, 400), 1100.0)
        assert result.reason is RejectReason.RATE_LIMITED
        assert len(inst.field) == 1
        assert len(sink.triggers) == 1
        assert inst.velocity.previous == Position(50, 50)

    asyncio.run(scenario())


def test_repeated_spot_shrinks_to_base_radius(sink, size):
    async def scenario():
        inst = build(sink, size)
        await unlock(inst.gate)
        inst.submit(Position(50, 50), 0.0)
        inst.submit(Position(50, 50), 200.0)
        radii = sorted(d.initial_radius for d in inst.field.tick(200.0))
        assert radii == pytest.approx([4.0, 6.0])

    asyncio.run(scenario())
