#!/usr/bin/env python3
"""
Camera + mouse instrument.

Point with your index finger (or click) on the canvas: lower is lower pitch,
the left and right halves play different voices, and every note leaves a
dot that fades out over 30 seconds. The first gesture only starts the audio.
"""

from __future__ import annotations

import os
import sys

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from gesture_music.cli import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
