import asyncio

import numpy as np
import pytest

cv2 = pytest.importorskip("cv2")

from gesture_music.particles import ParticleField  # noqa: E402
from gesture_music.render import WHITE, CanvasSurface, RenderLoop  # noqa: E402
from gesture_music.types import Dot, HslColor  # noqa: E402


BLACK = (0, 0, 0)


def test_surface_reports_size():
    s = CanvasSurface(120, 80)
    assert (s.width, s.height) == (120, 80)
    assert s.image().shape == (80, 120, 3)
    assert s.image().dtype == np.uint8


def test_resize_clears_to_background():
    s = CanvasSurface(10, 10, background=BLACK)
    s.fill_circle((5, 5), 3, WHITE)
    s.resize(20, 30)
    assert s.size == (20, 30)
    assert s.image().max() == 0


def test_wash_blends_towards_color():
    s = CanvasSurface(4, 4, background=BLACK)
    s.wash(WHITE, 0.065)
    assert s.image()[0, 0].tolist() == [17, 17, 17]


def test_filled_circle_center_takes_color():
    s = CanvasSurface(50, 50, background=WHITE)
    s.fill_circle((25, 25), 6, (10, 20, 30))
    assert s.image()[25, 25].tolist() == [10, 20, 30]
    assert s.image()[0, 0].tolist() == [255, 255, 255]


def test_filled_circle_opacity():
    s = CanvasSurface(50, 50, background=BLACK)
    s.fill_circle((25, 25), 6, (200, 200, 200), opacity=0.5)
    assert s.image()[25, 25].tolist() == [100, 100, 100]


def test_circle_partly_off_canvas():
    s = CanvasSurface(20, 20, background=BLACK)
    s.fill_circle((0, 0), 8, WHITE)
    s.fill_circle((100, 100), 8, WHITE)
    assert s.image()[0, 0].tolist() == [255, 255, 255]


def test_zero_size_surface_is_a_no_op():
    s = CanvasSurface(0, 0)
    s.wash(WHITE, 0.5)
    s.fill_circle((0, 0), 5, WHITE)
    assert s.image().shape == (0, 0, 3)


def make_loop(surface, field, presented=None):
    return RenderLoop(
        surface,
        field,
        clock=lambda: 0.0,
        present=(presented.append if presented is not None else None),
    )


def test_frame_draws_live_dots():
    surface = CanvasSurface(100, 100)
    field = ParticleField()
    color = HslColor(hue=240)
    field.append(Dot(x=50, y=50, initial_radius=10, color=color, created_at=1000.0))
    presented = []
    loop = make_loop(surface, field, presented)

    loop.draw_frame(1000.0)
    assert surface.image()[50, 50].tolist() == list(color.to_bgr())
    assert surface.image()[5, 5].tolist() == [255, 255, 255]
    assert presented == [surface]


def test_frame_prunes_expired_dots():
    surface = CanvasSurface(100, 100)
    field = ParticleField(lifetime_ms=500)
    field.append(Dot(x=50, y=50, initial_radius=10, color=HslColor(hue=20), created_at=0.0))
    make_loop(surface, field).draw_frame(500.0)
    assert len(field) == 0
    assert surface.image()[50, 50].tolist() == [255, 255, 255]


def test_old_strokes_fade_into_the_wash():
    surface = CanvasSurface(60, 60)
    field = ParticleField()
    field.append(Dot(x=30, y=30, initial_radius=8, color=HslColor(hue=240), created_at=0.0))
    loop = make_loop(surface, field)
    loop.draw_frame(0.0)
    assert surface.image()[30, 30].tolist() != [255, 255, 255]

    field.clear()
    for _ in range(120):
        loop.draw_frame(16.0)
    assert np.abs(surface.image()[30, 30].astype(int) - 255).max() <= 1


def test_empty_field_only_washes():
    surface = CanvasSurface(10, 10, background=BLACK)
    make_loop(surface, ParticleField()).draw_frame(0.0)
    assert surface.image()[3, 3].tolist() == [17, 17, 17]


def test_loop_runs_and_stops():
    surface = CanvasSurface(10, 10)
    presented = []
    loop = RenderLoop(surface, ParticleField(), fps=0, present=presented.append)

    async def scenario():
        loop.start()
        while len(presented) < 3:
            await asyncio.sleep(0)
        loop.stop()
        await asyncio.wait_for(loop.join(), timeout=1.0)

    asyncio.run(scenario())
    assert not loop.running
    assert loop.frames >= 3
