from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import cv2

from .model_assets import ensure_hand_landmarker_task
from .types import HandLandmark, HandPosition
from .utils import clamp_int


logger = logging.getLogger(__name__)

FINGERTIPS = {"thumb": 4, "index": 8, "middle": 12, "ring": 16, "pinky": 20}


@dataclass(frozen=True)
class _SolutionsBackend:
    hands: object


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    landmarker: object


def _create_solutions_backend(
    max_num_hands: int,
    model_complexity: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> Optional[_SolutionsBackend]:
    import mediapipe as mp  # type: ignore

    if not hasattr(mp, "solutions"):
        return None
    hands = mp.solutions.hands.Hands(
        static_image_mode=False,
        max_num_hands=max_num_hands,
        model_complexity=model_complexity,
        min_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _SolutionsBackend(hands=hands)


def _create_tasks_backend(
    model_path: str,
    max_num_hands: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> _TasksBackend:
    """
    Fallback for MediaPipe builds without `mp.solutions`.

    The Tasks HandLandmarker needs a `.task` model on disk (downloaded on first use).
    """

    import mediapipe as mp  # type: ignore
    from mediapipe.tasks.python import BaseOptions  # type: ignore
    from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode  # type: ignore

    model_path = ensure_hand_landmarker_task(model_path)
    options = HandLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=RunningMode.VIDEO,
        num_hands=max_num_hands,
        min_hand_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _TasksBackend(mp=mp, landmarker=HandLandmarker.create_from_options(options))


class HandPositionDetector:
    """
    Per-frame hand landmark detector backed by MediaPipe.

    Input frames are expected as **BGR** images (OpenCV default). Landmarks
    are reported in the pixel space of the frame they came from.
    """

    def __init__(
        self,
        max_num_hands: int = 1,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        tasks_model_path: str = "models/hand_landmarker.task",
    ) -> None:
        self._solutions = _create_solutions_backend(
            max_num_hands=max_num_hands,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._tasks: Optional[_TasksBackend] = None
        self._tasks_timestamp_ms = 0

        if self._solutions is None:
            logger.info("mediapipe has no `solutions`; using the Tasks HandLandmarker")
            try:
                self._tasks = _create_tasks_backend(
                    model_path=tasks_model_path,
                    max_num_hands=max_num_hands,
                    min_detection_confidence=min_detection_confidence,
                    min_tracking_confidence=min_tracking_confidence,
                )
            except FileNotFoundError as e:
                raise RuntimeError(
                    "MediaPipe Tasks HandLandmarker needs a model file on disk:\n"
                    f"  {tasks_model_path}\n\n"
                    "Download it and try again, or pass --tasks-model."
                ) from e
            except ImportError as e:
                raise RuntimeError(
                    "Could not initialize MediaPipe Hands: the installed `mediapipe` exposes neither\n"
                    "`mp.solutions` nor the Tasks vision API."
                ) from e

    def close(self) -> None:
        if self._solutions is not None:
            self._solutions.hands.close()
        if self._tasks is not None:
            self._tasks.landmarker.close()

    def __enter__(self) -> "HandPositionDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def detect(self, frame_bgr) -> List[HandPosition]:
        h, w = frame_bgr.shape[:2]
        if w == 0 or h == 0:
            return []
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        if self._solutions is not None:
            results = self._solutions.hands.process(frame_rgb)
            if not results.multi_hand_landmarks:
                return []

            handedness_list = results.multi_handedness or []
            positions: List[HandPosition] = []
            for i, hand_landmarks in enumerate(results.multi_hand_landmarks):
                label: Optional[str] = None
                score: Optional[float] = None
                if i < len(handedness_list) and handedness_list[i].classification:
                    c = handedness_list[i].classification[0]
                    label = getattr(c, "label", None)
                    score = float(getattr(c, "score", 0.0))
                positions.append(build_hand_position(hand_landmarks.landmark, label, score, w, h))
            return positions

        if self._tasks is None:
            return []

        mp = self._tasks.mp
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        # VIDEO mode wants strictly increasing timestamps.
        self._tasks_timestamp_ms += 33
        result = self._tasks.landmarker.detect_for_video(mp_image, self._tasks_timestamp_ms)

        hand_landmarks_list = getattr(result, "hand_landmarks", None) or []
        handedness_list = getattr(result, "handedness", None) or []

        positions = []
        for i, landmarks in enumerate(hand_landmarks_list):
            label = None
            score = None
            if i < len(handedness_list) and handedness_list[i]:
                cat0 = handedness_list[i][0]
                label = getattr(cat0, "category_name", None) or getattr(cat0, "display_name", None)
                score = float(getattr(cat0, "score", 0.0))
            positions.append(build_hand_position(landmarks, label, score, w, h))
        return positions


def build_hand_position(landmarks, label: Optional[str], score: Optional[float], w: int, h: int) -> HandPosition:
    """Convert normalized MediaPipe landmarks into pixel-space landmarks for a ``w`` x ``h`` frame."""
    lm_px: List[HandLandmark] = []
    for idx, lm in enumerate(landmarks):
        lm_px.append(
            HandLandmark(
                idx=idx,
                x_norm=float(lm.x),
                y_norm=float(lm.y),
                z_norm=float(getattr(lm, "z", 0.0)),
                x_px=clamp_int(int(round(float(lm.x) * w)), 0, w - 1),
                y_px=clamp_int(int(round(float(lm.y) * h)), 0, h - 1),
            )
        )

    tips = {name: (lm_px[i].x_px, lm_px[i].y_px) for name, i in FINGERTIPS.items() if i < len(lm_px)}
    return HandPosition(
        handedness_label=label,
        handedness_score=score,
        landmarks=lm_px,
        fingertips_px=tips,
    )
