from __future__ import annotations

import asyncio
import math

import pytest

from thrivesprite.models.schemas import AvatarConfig
from thrivesprite.render.surface import (
    DARK_PRESET,
    LIGHT_PRESET,
    OrbitCamera,
    RenderLoop,
    RenderSurface,
    idle_transform,
)


def test_idle_transform_at_rest_and_over_time():
    rest = idle_transform(0.0)
    assert rest.y == 0.0 and rest.yaw == 0.0

    later = idle_transform(math.pi)
    assert later.y == pytest.approx(math.sin(math.pi * 0.5) * 0.1)
    assert later.yaw == pytest.approx(math.sin(math.pi * 0.3) * 0.1)


def test_idle_motion_stays_small():
    for step in range(200):
        transform = idle_transform(step * 0.37)
        assert abs(transform.y) <= 0.1
        assert abs(transform.yaw) <= 0.1


def test_camera_zoom_is_bounded():
    camera = OrbitCamera()
    assert camera.position == pytest.approx((0.0, 0.0, 4.0), abs=1e-9)
    camera.zoom(-10)
    assert camera.distance == 2.0
    camera.zoom(100)
    assert camera.distance == 8.0


def test_camera_orbit_keeps_distance_and_avoids_poles():
    camera = OrbitCamera()
    camera.orbit(math.pi / 2, -10)
    x, y, z = camera.position
    assert math.sqrt(x * x + y * y + z * z) == pytest.approx(4.0)
    assert 0 < camera.polar < math.pi


def test_camera_pan_is_disabled():
    camera = OrbitCamera(distance=3.0)
    camera.orbit(0.5, 0.2)
    before = (camera.position, camera.distance, camera.azimuth, camera.polar)
    for dx, dy in [(1.0, 1.0), (-20.0, 0.0), (0.0, 1e6)]:
        assert camera.pan(dx, dy) is False
    assert (camera.position, camera.distance, camera.azimuth, camera.polar) == before


def test_lighting_follows_display_mode_only():
    surface = RenderSurface(config=AvatarConfig(hair_style="spiky"), seed=5)
    light_shapes = surface.shapes()
    assert surface.lighting is LIGHT_PRESET
    surface.set_dark(True)
    assert surface.lighting is DARK_PRESET
    assert surface.shapes() == light_shapes
    assert DARK_PRESET.ambient.intensity < LIGHT_PRESET.ambient.intensity
    assert (LIGHT_PRESET.environment, DARK_PRESET.environment) == ("dawn", "night")


def test_frames_of_one_scene_share_messy_jitter():
    surface = RenderSurface(config=AvatarConfig(hair_style="messy"))
    first = surface.frame(0.0)
    second = surface.frame(1.5)
    assert first.shapes == second.shapes
    assert first.transform != second.transform


def test_scene_payload_is_json_ready():
    surface = RenderSurface(config=AvatarConfig(accessory="antenna"))
    payload = surface.scene_payload()
    assert payload["config"]["accessory"] == "antenna"
    assert payload["lighting"]["name"] == "light"
    assert payload["shapes"][-1]["color"] == "#ffff00"


def test_render_loop_draws_frames_from_the_clock():
    ticks = iter([10.0, 10.0, 10.5, 11.0])
    seen = []

    async def on_frame(frame):  # noqa: ANN001
        seen.append(frame.elapsed)

    loop = RenderLoop(RenderSurface(), on_frame, fps=1000, clock=lambda: next(ticks))
    asyncio.run(loop.run(max_frames=3))

    assert seen == [0.0, 0.5, 1.0]
    assert loop.frames == 3
    assert not loop.running


def test_render_loop_stops_on_request():
    frames = []

    async def scenario() -> None:
        loop = RenderLoop(RenderSurface(), lambda frame: _record(frames, frame), fps=200)
        task = asyncio.create_task(loop.run())
        while len(frames) < 2:
            await asyncio.sleep(0.001)
        loop.stop()
        await asyncio.wait_for(task, timeout=1)

    asyncio.run(scenario())
    assert len(frames) >= 2


async def _record(frames, frame):  # noqa: ANN001
    frames.append(frame)


def test_render_loop_rejects_bad_fps():
    with pytest.raises(ValueError):
        RenderLoop(RenderSurface(), _record, fps=0)
