#!/usr/bin/env python3
"""
Play a scale through the synth without camera or window.

Notes alternate between the left (lead) and right (mono) voices.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from gesture_music.audio import NoteSynth  # noqa: E402
from gesture_music.notes import SCALES, get_scale  # noqa: E402
from gesture_music.types import Channel  # noqa: E402


async def play(scale_name: str, volume: float, gap_s: float) -> None:
    scale = get_scale(scale_name)
    with NoteSynth(volume=volume) as synth:
        await synth.unlock()
        for i, note in enumerate(scale):
            channel = Channel.LEFT if i % 2 == 0 else Channel.RIGHT
            print(f"{note:>4} {channel.value}")
            synth.trigger(note, channel)
            await asyncio.sleep(gap_s)
        # let the reverb tail ring out
        await asyncio.sleep(2.0)


def main() -> int:
    ap = argparse.ArgumentParser(description="Play a scale through the gesture-music synth.")
    ap.add_argument(
        "--scale",
        type=str,
        default="default",
        choices=list(SCALES.keys()),
        help="Musical scale to use (default: C4..C6)",
    )
    ap.add_argument("--volume", type=float, default=0.3, help="Volume level (0.0 to 1.0, default: 0.3)")
    ap.add_argument("--gap", type=float, default=0.3, help="Seconds between notes (default: 0.3)")
    args = ap.parse_args()

    asyncio.run(play(args.scale, args.volume, args.gap))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
