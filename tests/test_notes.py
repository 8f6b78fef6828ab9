import pytest

from gesture_music.notes import (
    DEFAULT_SCALE,
    color_for_index,
    get_scale,
    map_channel,
    map_position,
    midi_to_freq,
    note_to_midi,
)
from gesture_music.types import Channel, HslColor


N = len(DEFAULT_SCALE)


def test_default_scale_has_fourteen_notes():
    assert N == 14
    assert DEFAULT_SCALE[0] == "C4"
    assert DEFAULT_SCALE[-1] == "C6"


def test_top_of_canvas_is_highest_note():
    # raw index would be 14, clamped to 13
    assert map_position(0, 700, N) == 13


def test_bottom_of_canvas_is_lowest_note():
    assert map_position(700, 700, N) == 0
    assert map_position(699.999, 700, N) == 0


@pytest.mark.parametrize("y", [0, 1, 49.9, 50, 123.4, 350, 512, 699])
def test_index_always_in_range(y):
    assert 0 <= map_position(y, 700, N) < N


def test_index_bands_are_equal_height():
    # 700 px / 14 notes = 50 px per note, counted from the bottom
    assert map_position(700 - 25, 700, N) == 0
    assert map_position(700 - 75, 700, N) == 1
    assert map_position(25, 700, N) == 13


def test_out_of_canvas_is_clamped():
    assert map_position(-50, 700, N) == 13
    assert map_position(900, 700, N) == 0


def test_zero_height_canvas_maps_to_index_zero():
    assert map_position(10, 0, N) == 0


def test_channel_split_at_half_width():
    assert map_channel(0, 800) is Channel.LEFT
    assert map_channel(399.9, 800) is Channel.LEFT
    assert map_channel(400, 800) is Channel.RIGHT
    assert map_channel(799, 800) is Channel.RIGHT


def test_zero_width_canvas_does_not_crash():
    assert map_channel(0, 0) is Channel.RIGHT


def test_color_hue_spans_scale():
    assert color_for_index(0, N).hue == pytest.approx(20.0)
    assert color_for_index(N - 1, N).hue == pytest.approx(240.0)
    mid = color_for_index(7, N)
    assert mid.hue == pytest.approx(20 + 220 * 7 / 13)
    assert (mid.saturation, mid.lightness) == (100.0, 60.0)


def test_color_for_single_note_scale():
    assert color_for_index(0, 1).hue == pytest.approx(20.0)


def test_hsl_conversion():
    blue = HslColor(hue=240.0)
    assert blue.to_bgr() == (255, 51, 51)
    assert blue.css() == "hsl(240, 100%, 60%)"


def test_note_names_to_midi():
    assert note_to_midi("C4") == 60
    assert note_to_midi("A4") == 69
    assert note_to_midi("C6") == 84
    assert note_to_midi("F#5") == 78
    assert note_to_midi("Bb3") == 58
    assert midi_to_freq(69) == pytest.approx(440.0)


def test_bad_note_name():
    with pytest.raises(ValueError):
        note_to_midi("H2")


def test_unknown_scale():
    assert get_scale("pentatonic")[0] == "C4"
    with pytest.raises(ValueError):
        get_scale("dorian")
