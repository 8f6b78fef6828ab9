from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Tuple

import pytest

from gesture_music.gate import TriggerGate
from gesture_music.types import Channel


@dataclass
class Size:
    width: int = 800
    height: int = 700


@dataclass
class FakeSink:
    fail_unlock: bool = False
    fail_trigger: bool = False
    unlock_calls: int = 0
    triggers: List[Tuple[str, Channel]] = field(default_factory=list)

    async def unlock(self) -> None:
        self.unlock_calls += 1
        await asyncio.sleep(0)
        if self.fail_unlock:
            raise OSError("no audio device")

    def trigger(self, note: str, channel: Channel) -> None:
        if self.fail_trigger:
            raise OSError("audio device went away")
        self.triggers.append((note, channel))


async def unlock(gate: TriggerGate) -> None:
    """Run the unlock handshake to completion without spending a submission."""
    gate.handshake.request()
    await gate.handshake.wait()
    assert gate.handshake.unlocked


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def size() -> Size:
    return Size()
