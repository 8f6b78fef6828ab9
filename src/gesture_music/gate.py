from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .notes import DEFAULT_SCALE, color_for_index, map_channel, map_position
from .types import Accepted, AudioSink, GateResult, PlayEvent, Position, RejectReason, Rejected, SupportsSize


logger = logging.getLogger(__name__)

MIN_INTERVAL_MS = 200.0


class UnlockState(Enum):
    LOCKED = "locked"
    UNLOCKING = "unlocking"
    UNLOCKED = "unlocked"


class UnlockHandshake:
    """
    One-time asynchronous audio unlock.

    ``request()`` starts ``sink.unlock()`` on the running loop when LOCKED and
    does nothing otherwise. If the unlock raises, the handshake falls back to
    LOCKED so a later request can try again.
    """

    def __init__(self, sink: AudioSink) -> None:
        self._sink = sink
        self._state = UnlockState.LOCKED
        self._task: Optional[asyncio.Task] = None
        self._callbacks: List[Callable[[], None]] = []

    @property
    def state(self) -> UnlockState:
        return self._state

    @property
    def unlocked(self) -> bool:
        return self._state is UnlockState.UNLOCKED

    def request(self) -> None:
        if self._state is not UnlockState.LOCKED:
            return
        loop = asyncio.get_running_loop()
        self._state = UnlockState.UNLOCKING
        self._task = loop.create_task(self._run())

    def add_done_callback(self, fn: Callable[[], None]) -> None:
        if self.unlocked:
            fn()
        else:
            self._callbacks.append(fn)

    async def wait(self) -> None:
        """Wait for an in-flight unlock attempt to finish (successfully or not)."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _run(self) -> None:
        try:
            await self._sink.unlock()
        except Exception:
            logger.warning("audio unlock failed; next gesture will retry", exc_info=True)
            self._state = UnlockState.LOCKED
            return

        self._state = UnlockState.UNLOCKED
        logger.info("audio unlocked")
        callbacks, self._callbacks = self._callbacks, []
        for fn in callbacks:
            fn()


class TriggerGate:
    """
    Turns positions into play events.

    A submission is accepted only if at least ``min_interval_ms`` passed since
    the last accepted one and the audio sink is unlocked. The submission that
    starts the unlock is itself dropped.
    """

    def __init__(
        self,
        sink: AudioSink,
        surface: SupportsSize,
        *,
        scale: Sequence[str] = DEFAULT_SCALE,
        handshake: Optional[UnlockHandshake] = None,
        min_interval_ms: float = MIN_INTERVAL_MS,
    ) -> None:
        if not scale:
            raise ValueError("scale must contain at least one note")
        self._sink = sink
        self._surface = surface
        self.scale = tuple(scale)
        self.handshake = handshake if handshake is not None else UnlockHandshake(sink)
        self.min_interval_ms = float(min_interval_ms)
        self._last_accepted_ms = float("-inf")

    @property
    def last_accepted_ms(self) -> float:
        return self._last_accepted_ms

    def submit(self, position: Position, now: float) -> GateResult:
        if now - self._last_accepted_ms < self.min_interval_ms:
            return Rejected(RejectReason.RATE_LIMITED)

        if not self.handshake.unlocked:
            self.handshake.request()
            logger.debug("dropped gesture at (%.1f, %.1f): audio not unlocked yet", position.x, position.y)
            return Rejected(RejectReason.AUDIO_NOT_READY)

        # Read the size on every submission, the canvas follows the window.
        width, height = self._surface.width, self._surface.height
        n = len(self.scale)
        index = map_position(position.y, height, n)
        event = PlayEvent(
            pitch_index=index,
            note=self.scale[index],
            channel=map_channel(position.x, width),
            color=color_for_index(index, n),
            position=position,
            timestamp=now,
        )

        # A sink error propagates before anything is recorded.
        self._sink.trigger(event.note, event.channel)
        self._last_accepted_ms = now
        return Accepted(event)
