"""Map an avatar configuration to its tree of primitive shapes.

Each trait is resolved through a lookup table from style tag to a pure
builder. Tags missing from a table resolve through that table's default
entry, so resolution is total for any configuration.
"""
from __future__ import annotations

import math
import random
from typing import Callable, List, Mapping, Optional

from .. import catalog
from ..models.schemas import AvatarConfig
from .shapes import Part, Shape, ShapeKind, ShapeTree, Vec3, offset

BODY_Y = -0.2
FACE_DEPTH = 0.9
CYLINDER_FACE_DEPTH = 0.7

EYE_COLOR = "#000000"
MOUTH_COLOR = "#333333"
EXCITED_MOUTH_COLOR = "#ff4444"
ANTENNA_TIP_COLOR = "#ffff00"

MESSY_TUFTS = 8
MESSY_RING_RADIUS = 0.3
MESSY_BASE_Y = 0.8
MESSY_JITTER = 0.2


def _color(value: Optional[str], default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def face_depth(body_type: str) -> float:
    """Forward offset of eyes and mouth; the flatter cylinder front sits closer in."""

    return CYLINDER_FACE_DEPTH if body_type == "cylinder" else FACE_DEPTH


# --- body ---------------------------------------------------------------

def _body(kind: ShapeKind, args: tuple) -> Callable[[str], List[Shape]]:
    def build(color: str) -> List[Shape]:
        return [Shape(Part.BODY, kind, args, (0.0, BODY_Y, 0.0), color)]

    return build


BODY_BUILDERS: Mapping[str, Callable[[str], List[Shape]]] = {
    "sphere": _body(ShapeKind.SPHERE, (0.8, 32, 32)),
    "cube": _body(ShapeKind.BOX, (1.2, 1.5, 1.0)),
    "cylinder": _body(ShapeKind.CYLINDER, (0.7, 0.8, 1.5, 16)),
}


# --- eyes ---------------------------------------------------------------

def _round_eyes(radius: float, x: float, y: float) -> Callable[[float], List[Shape]]:
    def build(depth: float) -> List[Shape]:
        return [
            Shape(Part.EYE, ShapeKind.SPHERE, (radius, 16, 16), (side * x, y, depth), EYE_COLOR)
            for side in (-1, 1)
        ]

    return build


def _sleepy_eyes(depth: float) -> List[Shape]:
    # Unit sphere of radius 0.1 flattened to radii 0.2 x 0.1 x 0.05.
    return [
        Shape(
            Part.EYE,
            ShapeKind.SPHERE,
            (0.1, 16, 16),
            (side * 0.3, 0.2, depth),
            EYE_COLOR,
            scale=(2.0, 1.0, 0.5),
        )
        for side in (-1, 1)
    ]


EYE_BUILDERS: Mapping[str, Callable[[float], List[Shape]]] = {
    "dots": _round_eyes(0.08, 0.2, 0.25),
    "large": _round_eyes(0.15, 0.25, 0.3),
    "sleepy": _sleepy_eyes,
}


# --- mouth --------------------------------------------------------------

def _smile(depth: float) -> List[Shape]:
    return [
        Shape(
            Part.MOUTH,
            ShapeKind.ARC,
            (0.12, 16, 8, 0.0, math.pi),
            (0.0, -0.05, depth),
            MOUTH_COLOR,
            rotation=(0.0, 0.0, math.pi),
        )
    ]


def _neutral(depth: float) -> List[Shape]:
    return [Shape(Part.MOUTH, ShapeKind.BOX, (0.2, 0.05, 0.05), (0.0, -0.05, depth), MOUTH_COLOR)]


def _excited(depth: float) -> List[Shape]:
    return [
        Shape(
            Part.MOUTH,
            ShapeKind.ARC,
            (0.15, 16, 8, 0.0, math.pi),
            (0.0, -0.1, depth),
            EXCITED_MOUTH_COLOR,
        )
    ]


MOUTH_BUILDERS: Mapping[str, Callable[[float], List[Shape]]] = {
    "smile": _smile,
    "neutral": _neutral,
    "excited": _excited,
}


# --- hair ---------------------------------------------------------------

HairBuilder = Callable[[str, random.Random], List[Shape]]


def _bald(color: str, rng: random.Random) -> List[Shape]:
    return []


def _straight(color: str, rng: random.Random) -> List[Shape]:
    return [Shape(Part.HAIR, ShapeKind.CYLINDER, (0.4, 0.3, 0.3, 16), (0.0, 0.7, 0.0), color)]


def _spiky(color: str, rng: random.Random) -> List[Shape]:
    return [
        Shape(Part.HAIR, ShapeKind.CONE, (0.1, 0.4, 8), (0.0, 0.9, 0.0), color),
        Shape(Part.HAIR, ShapeKind.CONE, (0.08, 0.3, 8), (-0.3, 0.8, 0.0), color),
        Shape(Part.HAIR, ShapeKind.CONE, (0.08, 0.3, 8), (0.3, 0.8, 0.0), color),
    ]


def _curly(color: str, rng: random.Random) -> List[Shape]:
    return [
        Shape(Part.HAIR, ShapeKind.SPHERE, (0.4, 16, 16), (0.0, 0.7, 0.0), color),
        Shape(Part.HAIR, ShapeKind.SPHERE, (0.15, 16, 16), (-0.2, 0.8, 0.2), color),
        Shape(Part.HAIR, ShapeKind.SPHERE, (0.15, 16, 16), (0.2, 0.8, 0.2), color),
    ]


def _ponytail(color: str, rng: random.Random) -> List[Shape]:
    return [
        Shape(Part.HAIR, ShapeKind.SPHERE, (0.35, 16, 16), (0.0, 0.7, 0.0), color),
        Shape(Part.HAIR, ShapeKind.CYLINDER, (0.08, 0.12, 0.8, 16), (0.0, 0.5, -0.6), color),
    ]


def _messy(color: str, rng: random.Random) -> List[Shape]:
    tufts = []
    for i in range(MESSY_TUFTS):
        angle = (i / MESSY_TUFTS) * math.pi * 2
        position = (
            math.cos(angle) * MESSY_RING_RADIUS,
            MESSY_BASE_Y + rng.random() * MESSY_JITTER,
            math.sin(angle) * MESSY_RING_RADIUS,
        )
        tufts.append(Shape(Part.HAIR, ShapeKind.SPHERE, (0.08, 8, 8), position, color))
    return tufts


HAIR_BUILDERS: Mapping[str, HairBuilder] = {
    "bald": _bald,
    "straight": _straight,
    "spiky": _spiky,
    "curly": _curly,
    "ponytail": _ponytail,
    "messy": _messy,
}


# --- accessory ----------------------------------------------------------

def _grouped(anchor: Vec3, shapes: List[Shape]) -> List[Shape]:
    return [
        Shape(s.part, s.kind, s.args, offset(s.position, anchor), s.color, s.rotation, s.scale)
        for s in shapes
    ]


def _no_accessory(color: str) -> List[Shape]:
    return []


def _glasses(color: str) -> List[Shape]:
    return [
        Shape(Part.ACCESSORY, ShapeKind.TORUS, (0.12, 0.02, 8, 16), (-0.25, 0.25, 0.85), color),
        Shape(Part.ACCESSORY, ShapeKind.TORUS, (0.12, 0.02, 8, 16), (0.25, 0.25, 0.85), color),
        Shape(
            Part.ACCESSORY,
            ShapeKind.CYLINDER,
            (0.01, 0.01, 0.15, 8),
            (0.0, 0.25, 0.85),
            color,
            rotation=(0.0, 0.0, math.pi / 2),
        ),
    ]


def _hat(color: str) -> List[Shape]:
    return _grouped(
        (0.0, 1.1, 0.0),
        [
            Shape(Part.ACCESSORY, ShapeKind.CYLINDER, (0.5, 0.5, 0.2, 16), (0.0, 0.0, 0.0), color),
            Shape(Part.ACCESSORY, ShapeKind.CYLINDER, (0.3, 0.35, 0.3, 16), (0.0, 0.2, 0.0), color),
        ],
    )


def _bow(color: str) -> List[Shape]:
    return _grouped(
        (0.0, 0.9, 0.0),
        [
            Shape(Part.ACCESSORY, ShapeKind.SPHERE, (0.1, 8, 8), (-0.15, 0.0, 0.0), color),
            Shape(Part.ACCESSORY, ShapeKind.SPHERE, (0.1, 8, 8), (0.15, 0.0, 0.0), color),
            Shape(Part.ACCESSORY, ShapeKind.BOX, (0.05, 0.15, 0.05), (0.0, 0.0, 0.0), color),
        ],
    )


def _antenna(color: str) -> List[Shape]:
    return _grouped(
        (0.0, 1.0, 0.0),
        [
            Shape(Part.ACCESSORY, ShapeKind.CYLINDER, (0.02, 0.02, 0.4, 8), (0.0, 0.0, 0.0), color),
            Shape(Part.ACCESSORY, ShapeKind.SPHERE, (0.05, 8, 8), (0.0, 0.25, 0.0), ANTENNA_TIP_COLOR),
        ],
    )


ACCESSORY_BUILDERS: Mapping[str, Callable[[str], List[Shape]]] = {
    "none": _no_accessory,
    "glasses": _glasses,
    "hat": _hat,
    "bow": _bow,
    "antenna": _antenna,
}


def _pick(table: Mapping[str, Callable], trait: str, value: str) -> Callable:
    builder = table.get(value)
    if builder is None:
        builder = table[catalog.default_for(trait)]
    return builder


def resolve(config: AvatarConfig, rng: Optional[random.Random] = None) -> ShapeTree:
    """Resolve ``config`` into body, eyes, mouth, hair and accessory shapes, in that order.

    ``rng`` only feeds randomized styles (messy hair). Passing a seeded
    generator makes the result reproducible; without one each call draws
    fresh jitter.
    """

    rng = rng if rng is not None else random.Random()
    depth = face_depth(config.body_type)

    body_color = _color(config.body_color, catalog.DEFAULT_BODY_COLOR)
    hair_color = _color(config.hair_color, catalog.DEFAULT_HAIR_COLOR)
    accessory_color = _color(config.accessory_color, catalog.DEFAULT_ACCESSORY_COLOR)

    shapes: List[Shape] = []
    shapes += _pick(BODY_BUILDERS, "body_type", config.body_type)(body_color)
    shapes += _pick(EYE_BUILDERS, "eye_style", config.eye_style)(depth)
    shapes += _pick(MOUTH_BUILDERS, "mouth_style", config.mouth_style)(depth)
    shapes += _pick(HAIR_BUILDERS, "hair_style", config.hair_style)(hair_color, rng)
    shapes += _pick(ACCESSORY_BUILDERS, "accessory", config.accessory)(accessory_color)
    return tuple(shapes)
