from types import SimpleNamespace

import pytest

pytest.importorskip("cv2")

from gesture_music.detector import build_hand_position  # noqa: E402


def fake_landmarks(n=21, x=0.5, y=0.25):
    return [SimpleNamespace(x=x, y=y, z=-0.1) for _ in range(n)]


def test_landmarks_scaled_to_frame_pixels():
    hand = build_hand_position(fake_landmarks(), "Right", 0.97, 640, 480)
    assert len(hand.landmarks) == 21
    lm = hand.landmarks[8]
    assert (lm.x_px, lm.y_px) == (320, 120)
    assert lm.idx == 8
    assert lm.z_norm == pytest.approx(-0.1)
    assert hand.fingertips_px["index"] == (320, 120)
    assert hand.handedness_label == "Right"


def test_landmarks_clamped_inside_frame():
    hand = build_hand_position(fake_landmarks(x=1.2, y=-0.3), None, None, 640, 480)
    lm = hand.landmarks[0]
    assert (lm.x_px, lm.y_px) == (639, 0)
    assert lm.x_norm == pytest.approx(1.2)


def test_partial_hand_only_reports_present_tips():
    hand = build_hand_position(fake_landmarks(n=9), None, None, 100, 100)
    assert set(hand.fingertips_px) == {"thumb", "index"}
