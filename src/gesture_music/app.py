from __future__ import annotations

import asyncio
import logging
import platform
from typing import Callable, List, Optional

import cv2
import numpy as np

from .config import AppConfig, CameraConfig
from .detector import HandPositionDetector
from .drawing import draw_preview, draw_text
from .gate import TriggerGate, UnlockState
from .instrument import GestureInstrument
from .notes import get_scale
from .particles import ParticleField
from .render import CanvasSurface, RenderLoop
from .sources import DetectorSource, PointerSource
from .types import AudioSink, monotonic_ms
from .velocity import VelocityEstimator


logger = logging.getLogger(__name__)

QUIT_KEYS = (ord("q"), 27)


def open_camera(cfg: CameraConfig) -> cv2.VideoCapture:
    # AVFoundation is the reliable backend on macOS and triggers the permission prompt.
    if platform.system() == "Darwin":
        cap = cv2.VideoCapture(cfg.index, cv2.CAP_AVFOUNDATION)
    else:
        cap = cv2.VideoCapture(cfg.index)
    if not cap.isOpened():
        raise RuntimeError(
            f"Could not open camera index {cfg.index}. "
            "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal. "
            "Use --no-camera to play with the mouse only."
        )
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, cfg.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cfg.height)
    return cap


def frame_reader(cap: cv2.VideoCapture) -> Callable[[], Optional[np.ndarray]]:
    def read() -> Optional[np.ndarray]:
        ok, frame = cap.read()
        return frame if ok else None

    return read


def _default_sink(config: AppConfig) -> AudioSink:
    from .audio import NoteSynth

    a = config.audio
    return NoteSynth(
        sample_rate=a.sample_rate,
        volume=a.volume,
        note_ms=a.note_ms,
        reverb_decay_s=a.reverb_decay_s,
        reverb_wet=a.reverb_wet,
        device=a.device,
    )


class GestureMusicApp:
    """
    Window + camera shell around the instrument.

    Click anywhere, or point with your index finger, to play. Lower is lower
    pitch; the left and right halves use different voices.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        sink: Optional[AudioSink] = None,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self.config = config
        self.clock = clock
        inst = config.instrument
        rcfg = config.render

        self.sink = sink if sink is not None else _default_sink(config)
        self.surface = CanvasSurface(rcfg.width, rcfg.height)
        self.field = ParticleField(inst.dot_lifetime_ms)
        self.gate = TriggerGate(
            self.sink,
            self.surface,
            scale=get_scale(inst.scale),
            min_interval_ms=inst.min_interval_ms,
        )
        self.velocity = VelocityEstimator(base_radius=inst.base_radius, max_radius=inst.max_radius)
        self.instrument = GestureInstrument(self.gate, self.velocity, self.field)
        self.pointer = PointerSource(self.instrument.submit, clock=clock)
        self.render_loop = RenderLoop(
            self.surface,
            self.field,
            clock=clock,
            fps=rcfg.fps,
            wash_alpha=rcfg.wash_alpha,
            present=self._present,
        )
        self.detector_source: Optional[DetectorSource] = None
        self._quit = asyncio.Event()

    def request_quit(self) -> None:
        self._quit.set()

    @property
    def quit_requested(self) -> bool:
        return self._quit.is_set()

    async def run(self) -> None:
        self._quit = asyncio.Event()
        win = self.config.window_name
        cv2.namedWindow(win, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(win, self.surface.width, self.surface.height)
        cv2.setMouseCallback(win, self._on_mouse)
        self.gate.handshake.add_done_callback(lambda: logger.info("audio ready, play away"))

        cap = None
        detector = None
        try:
            if self.config.use_camera:
                cam = self.config.camera
                cap = open_camera(cam)
                detector = HandPositionDetector(max_num_hands=cam.max_hands, tasks_model_path=cam.tasks_model)
                self.detector_source = DetectorSource(
                    detector,
                    frame_reader(cap),
                    self.instrument.submit,
                    self.surface,
                    clock=self.clock,
                    landmark_index=cam.landmark_index,
                    mirror=cam.mirror,
                )
                self.detector_source.start()
            self.render_loop.start()
            logger.info("click or point to play; q/esc quits")
            await self._wait_for_exit()
        finally:
            await self._shutdown()
            if detector is not None:
                detector.close()
            if cap is not None:
                cap.release()
            close = getattr(self.sink, "close", None)
            if close is not None:
                close()
            cv2.destroyAllWindows()

    async def _wait_for_exit(self) -> None:
        watched: List[asyncio.Future] = [
            asyncio.ensure_future(self._quit.wait()),
            asyncio.ensure_future(self.render_loop.join()),
        ]
        if self.detector_source is not None:
            watched.append(asyncio.ensure_future(self.detector_source.join()))

        done, pending = await asyncio.wait(watched, return_when=asyncio.FIRST_COMPLETED)
        for fut in pending:
            fut.cancel()
        for fut in done:
            # Surfaces an exception that ended one of the loops.
            fut.result()

    async def _shutdown(self) -> None:
        self.render_loop.stop()
        loops = [self.render_loop.join()]
        if self.detector_source is not None:
            self.detector_source.stop()
            loops.append(self.detector_source.join())
        for result in await asyncio.gather(*loops, return_exceptions=True):
            if isinstance(result, Exception):
                logger.debug("loop ended with %r", result)

    def _on_mouse(self, event, x, y, flags, param) -> None:
        if event == cv2.EVENT_LBUTTONDOWN:
            self.pointer.click(x, y)

    def _status_line(self) -> str:
        state = self.gate.handshake.state
        if state is UnlockState.LOCKED:
            return "click or wave to start audio"
        if state is UnlockState.UNLOCKING:
            return "starting audio..."
        line = f"dots: {len(self.field)} | q/esc quit"
        if self.detector_source is not None and self.detector_source.failures:
            line += f" | skipped frames: {self.detector_source.failures}"
        return line

    def _present(self, surface: CanvasSurface) -> None:
        win = self.config.window_name
        frame = surface.image()

        source = self.detector_source
        if source is not None and source.last_frame is not None:
            draw_preview(
                frame,
                source.last_frame,
                width=self.config.render.preview_width,
                mirror=source.mirror,
                marker=source.tracked_point(),
            )
        if frame.shape[0] > 0 and frame.shape[1] > 0:
            draw_text(frame, self._status_line(), (12, 28), color=(120, 90, 20))

        cv2.imshow(win, frame)
        key = cv2.waitKey(1) & 0xFF
        if key in QUIT_KEYS:
            self.request_quit()
            return
        if cv2.getWindowProperty(win, cv2.WND_PROP_VISIBLE) < 1:
            self.request_quit()
            return

        # Follow the window size so mouse coordinates stay 1:1 with the canvas.
        _, _, ww, wh = cv2.getWindowImageRect(win)
        if ww > 0 and wh > 0:
            surface.resize(ww, wh)
