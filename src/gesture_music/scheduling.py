from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union


logger = logging.getLogger(__name__)

Step = Callable[[], Union[None, Awaitable[Any]]]


class RepeatingTask:
    """
    Runs ``step`` over and over on the running asyncio loop until stopped.

    ``interval_s`` is the target period; a step that overruns it is followed
    immediately by the next one (after yielding to the loop once).
    """

    def __init__(self, step: Step, *, interval_s: float = 0.0, name: Optional[str] = None) -> None:
        self._step = step
        self.interval_s = max(0.0, float(interval_s))
        self.name = name or getattr(step, "__name__", "repeating-task")
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self.iterations = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("started %s (interval %.4fs)", self.name, self.interval_s)

    def stop(self) -> None:
        self._stop.set()

    async def join(self) -> None:
        """Wait for the loop to finish; re-raises whatever ended it. Cancelling the caller leaves the loop running."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while not self._stop.is_set():
            started = loop.time()
            result = self._step()
            if inspect.isawaitable(result):
                await result
            self.iterations += 1

            delay = self.interval_s - (loop.time() - started)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=max(0.0, delay))
            except asyncio.TimeoutError:
                pass
        logger.debug("stopped %s after %d iterations", self.name, self.iterations)
