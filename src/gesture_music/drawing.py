from __future__ import annotations

from typing import Optional, Tuple

import cv2
import numpy as np


def draw_point(frame, pt: Tuple[int, int], color=(0, 0, 255), radius=5):
    cv2.circle(frame, pt, radius, color, -1, lineType=cv2.LINE_AA)
    return frame


def draw_text(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame


def draw_preview(
    frame,
    camera_bgr: np.ndarray,
    *,
    width: int = 192,
    margin: int = 16,
    mirror: bool = True,
    marker: Optional[Tuple[int, int]] = None,
):
    """
    Paste a small camera thumbnail into the bottom-right corner of ``frame``.

    ``marker`` is a point in camera pixels (unmirrored) to highlight, e.g. the tracked fingertip.
    """

    fh, fw = frame.shape[:2]
    ch, cw = camera_bgr.shape[:2]
    if width <= 0 or cw == 0 or ch == 0:
        return frame

    tw = min(width, fw - 2 * margin)
    th = int(round(tw * ch / cw))
    if tw <= 0 or th <= 0 or th > fh - 2 * margin:
        return frame

    thumb = cv2.resize(camera_bgr, (tw, th), interpolation=cv2.INTER_AREA)
    if mirror:
        thumb = cv2.flip(thumb, 1)
    if marker is not None:
        mx = int(round(marker[0] * tw / cw))
        my = int(round(marker[1] * th / ch))
        if mirror:
            mx = tw - 1 - mx
        draw_point(thumb, (mx, my), color=(0, 200, 255), radius=4)

    x0 = fw - margin - tw
    y0 = fh - margin - th
    frame[y0 : y0 + th, x0 : x0 + tw] = thumb
    cv2.rectangle(frame, (x0 - 1, y0 - 1), (x0 + tw, y0 + th), (200, 230, 160), 2)
    return frame
