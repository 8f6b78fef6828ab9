from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from .config import AppConfig, AudioConfig, CameraConfig, InstrumentConfig, RenderConfig
from .notes import SCALES


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # mediapipe/absl is chatty at INFO
    logging.getLogger("absl").setLevel(logging.ERROR)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        fh = RotatingFileHandler(log_file, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(fh)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Play notes by clicking or pointing at the camera; each note leaves a fading dot."
    )
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--no-camera", action="store_true", help="Mouse only, do not open the camera")
    ap.add_argument("--capture-width", type=int, default=1280, help="Capture width (best effort)")
    ap.add_argument("--capture-height", type=int, default=720, help="Capture height (best effort)")
    ap.add_argument("--width", type=int, default=1280, help="Initial canvas width")
    ap.add_argument("--height", type=int, default=720, help="Initial canvas height")
    ap.add_argument("--fps", type=float, default=60.0, help="Render frame rate (default: 60)")
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring of the camera (default is mirrored/selfie mode)",
    )
    ap.add_argument(
        "--scale",
        type=str,
        default="default",
        choices=list(SCALES.keys()),
        help="Scale to play, low to high (default: C4..C6, 14 notes)",
    )
    ap.add_argument("--volume", type=float, default=0.3, help="Volume level (0.0 to 1.0, default: 0.3)")
    ap.add_argument("--min-interval-ms", type=float, default=200.0, help="Minimum time between notes")
    ap.add_argument("--reverb-wet", type=float, default=0.5, help="Reverb mix (0.0 to 1.0, default: 0.5)")
    ap.add_argument("--audio-device", type=int, default=None, help="sounddevice output device index")
    ap.add_argument(
        "--tasks-model",
        default="models/hand_landmarker.task",
        help="Path to MediaPipe Tasks model (auto-downloaded if missing)",
    )
    ap.add_argument("--log-file", default=None, help="Also write logs to this rotating file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def config_from_args(args: argparse.Namespace) -> AppConfig:
    return AppConfig(
        instrument=InstrumentConfig(scale=args.scale, min_interval_ms=args.min_interval_ms),
        render=RenderConfig(width=args.width, height=args.height, fps=args.fps),
        audio=AudioConfig(volume=args.volume, reverb_wet=args.reverb_wet, device=args.audio_device),
        camera=CameraConfig(
            index=args.camera,
            width=args.capture_width,
            height=args.capture_height,
            mirror=not args.no_mirror,
            tasks_model=args.tasks_model,
        ),
        use_camera=not args.no_camera,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.log_file)
    config = config_from_args(args)

    from .app import GestureMusicApp

    try:
        asyncio.run(GestureMusicApp(config).run())
    except KeyboardInterrupt:
        pass
    except RuntimeError as e:
        logger.error("%s", e, exc_info=args.verbose)
        return 1
    return 0
