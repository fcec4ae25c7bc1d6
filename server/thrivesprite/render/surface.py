"""Frame model for the 3D preview: idle motion, orbit camera and lighting."""
from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

from ..geometry.resolver import resolve
from ..geometry.shapes import ShapeTree, Vec3, scene_payload
from ..models.schemas import AvatarConfig

logger = logging.getLogger(__name__)

BOB_FREQUENCY = 0.5
BOB_AMPLITUDE = 0.1
SWAY_FREQUENCY = 0.3
SWAY_AMPLITUDE = 0.1


@dataclass(frozen=True, slots=True)
class Transform:
    """Root transform applied to the whole shape tree."""

    y: float
    yaw: float

    def to_dict(self) -> Dict[str, Any]:
        return {"position": [0.0, self.y, 0.0], "rotation": [0.0, self.yaw, 0.0]}


def idle_transform(elapsed: float) -> Transform:
    """Floating bob and yaw sway as independent sinusoids of elapsed seconds."""

    return Transform(
        y=math.sin(elapsed * BOB_FREQUENCY) * BOB_AMPLITUDE,
        yaw=math.sin(elapsed * SWAY_FREQUENCY) * SWAY_AMPLITUDE,
    )


@dataclass
class OrbitCamera:
    """Orbit/zoom camera around the origin. Panning is disabled."""

    distance: float = 4.0
    azimuth: float = 0.0
    polar: float = math.pi / 2
    fov: float = 50.0
    min_distance: float = 2.0
    max_distance: float = 8.0

    _POLAR_EPSILON = 1e-3

    def __post_init__(self) -> None:
        self.distance = self._clamp_distance(self.distance)

    def _clamp_distance(self, value: float) -> float:
        return min(self.max_distance, max(self.min_distance, value))

    def orbit(self, delta_azimuth: float, delta_polar: float = 0.0) -> None:
        self.azimuth = (self.azimuth + delta_azimuth) % (2 * math.pi)
        self.polar = min(
            math.pi - self._POLAR_EPSILON,
            max(self._POLAR_EPSILON, self.polar + delta_polar),
        )

    def zoom(self, delta: float) -> None:
        """Move towards (negative) or away from (positive) the subject, within bounds."""

        self.distance = self._clamp_distance(self.distance + delta)

    def pan(self, dx: float, dy: float) -> bool:
        logger.debug("Ignoring pan request (%s, %s); panning is disabled", dx, dy)
        return False

    @property
    def position(self) -> Vec3:
        sin_polar = math.sin(self.polar)
        return (
            self.distance * sin_polar * math.sin(self.azimuth),
            self.distance * math.cos(self.polar),
            self.distance * sin_polar * math.cos(self.azimuth),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"position": list(self.position), "fov": self.fov, "distance": self.distance}


@dataclass(frozen=True, slots=True)
class Light:
    kind: str
    intensity: float
    color: str = "#ffffff"
    position: Optional[Vec3] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind, "intensity": self.intensity, "color": self.color}
        if self.position is not None:
            data["position"] = list(self.position)
        return data


@dataclass(frozen=True, slots=True)
class LightingPreset:
    name: str
    environment: str
    ambient: Light
    directional: Light
    point: Light

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "environment": self.environment,
            "lights": [self.ambient.to_dict(), self.directional.to_dict(), self.point.to_dict()],
        }


LIGHT_PRESET = LightingPreset(
    name="light",
    environment="dawn",
    ambient=Light("ambient", 0.6),
    directional=Light("directional", 1.2, "#FFF5E6", (5.0, 5.0, 5.0)),
    point=Light("point", 0.5, "#FFE4B5", (-5.0, 0.0, 5.0)),
)

DARK_PRESET = LightingPreset(
    name="dark",
    environment="night",
    ambient=Light("ambient", 0.3),
    directional=Light("directional", 0.8, "#4A90E2", (5.0, 5.0, 5.0)),
    point=Light("point", 0.5, "#7B68EE", (-5.0, 0.0, 5.0)),
)


def lighting_for(dark: bool) -> LightingPreset:
    return DARK_PRESET if dark else LIGHT_PRESET


@dataclass(frozen=True)
class Frame:
    elapsed: float
    shapes: ShapeTree
    transform: Transform
    lighting: LightingPreset
    camera: Dict[str, Any]


@dataclass
class RenderSurface:
    """Current preview state: what to draw, how to light it and where the camera is."""

    config: AvatarConfig = field(default_factory=AvatarConfig)
    dark: bool = False
    camera: OrbitCamera = field(default_factory=OrbitCamera)
    seed: int = field(default_factory=lambda: random.getrandbits(32))

    def set_config(self, config: AvatarConfig) -> None:
        # A new scene gets new messy-hair jitter; frames of the same scene agree.
        self.config = config
        self.seed = random.getrandbits(32)

    def set_dark(self, dark: bool) -> None:
        self.dark = bool(dark)

    @property
    def lighting(self) -> LightingPreset:
        return lighting_for(self.dark)

    def shapes(self) -> ShapeTree:
        return resolve(self.config, random.Random(self.seed))

    def frame(self, elapsed: float) -> Frame:
        return Frame(
            elapsed=elapsed,
            shapes=self.shapes(),
            transform=idle_transform(elapsed),
            lighting=self.lighting,
            camera=self.camera.to_dict(),
        )

    def scene_payload(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_record(),
            "shapes": scene_payload(self.shapes()),
            "lighting": self.lighting.to_dict(),
        }


class RenderLoop:
    """Cooperative redraw loop driven by wall-clock time."""

    def __init__(
        self,
        surface: RenderSurface,
        on_frame: Callable[[Frame], Awaitable[None]],
        *,
        fps: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive")
        self._surface = surface
        self._on_frame = on_frame
        self._interval = 1.0 / fps
        self._clock = clock
        self._running = False
        self.frames = 0

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._running = False

    async def run(self, max_frames: Optional[int] = None) -> None:
        start = self._clock()
        self._running = True
        try:
            while self._running:
                await self._on_frame(self._surface.frame(self._clock() - start))
                self.frames += 1
                if max_frames is not None and self.frames >= max_frames:
                    break
                await asyncio.sleep(self._interval)
        finally:
            self._running = False
