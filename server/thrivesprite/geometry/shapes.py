"""Primitive shape descriptors produced by the geometry resolver."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

Vec3 = Tuple[float, float, float]

ORIGIN: Vec3 = (0.0, 0.0, 0.0)
UNIT_SCALE: Vec3 = (1.0, 1.0, 1.0)


class ShapeKind(str, Enum):
    """Primitive kinds; ``args`` follow the matching three.js geometry signature."""

    SPHERE = "sphere"  # radius, width segments, height segments
    BOX = "box"  # width, height, depth
    CYLINDER = "cylinder"  # radius top, radius bottom, height, radial segments
    CONE = "cone"  # radius, height, radial segments
    TORUS = "torus"  # radius, tube, radial segments, tubular segments
    ARC = "arc"  # partial sphere: radius, width segs, height segs, phi start, phi length


class Part(str, Enum):
    BODY = "body"
    EYE = "eye"
    MOUTH = "mouth"
    HAIR = "hair"
    ACCESSORY = "accessory"


@dataclass(frozen=True, slots=True)
class Shape:
    part: Part
    kind: ShapeKind
    args: Tuple[float, ...]
    position: Vec3
    color: str
    rotation: Vec3 = ORIGIN
    scale: Vec3 = UNIT_SCALE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "part": self.part.value,
            "kind": self.kind.value,
            "args": list(self.args),
            "position": list(self.position),
            "rotation": list(self.rotation),
            "scale": list(self.scale),
            "color": self.color,
        }


ShapeTree = Tuple[Shape, ...]


def parts(tree: Iterable[Shape], part: Part) -> List[Shape]:
    """Shapes of ``tree`` belonging to ``part``, in order."""

    return [shape for shape in tree if shape.part is part]


def scene_payload(tree: Iterable[Shape]) -> List[Dict[str, Any]]:
    return [shape.to_dict() for shape in tree]


def offset(position: Vec3, by: Vec3) -> Vec3:
    return (position[0] + by[0], position[1] + by[1], position[2] + by[2])
