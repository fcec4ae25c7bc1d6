"""Static style catalog: the selectable values for every avatar trait."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True, slots=True)
class StyleOption:
    """One selectable value of a trait, as shown in the customizer."""

    id: str
    label: str
    glyph: str


BODY_TYPES: Tuple[StyleOption, ...] = (
    StyleOption("sphere", "Redondo", "⚪"),
    StyleOption("cube", "Quadrado", "⬜"),
    StyleOption("cylinder", "Cilindro", "🔵"),
)

EYE_STYLES: Tuple[StyleOption, ...] = (
    StyleOption("dots", "Pontos", "👀"),
    StyleOption("large", "Grandes", "😃"),
    StyleOption("sleepy", "Sonolento", "😴"),
)

MOUTH_STYLES: Tuple[StyleOption, ...] = (
    StyleOption("smile", "Sorriso", "😊"),
    StyleOption("neutral", "Neutro", "😐"),
    StyleOption("excited", "Animado", "😆"),
)

HAIR_STYLES: Tuple[StyleOption, ...] = (
    StyleOption("bald", "Careca", "🔵"),
    StyleOption("straight", "Liso", "💇"),
    StyleOption("spiky", "Espetado", "🦔"),
    StyleOption("curly", "Cacheado", "🌀"),
    StyleOption("ponytail", "Rabo de Cavalo", "🎀"),
    StyleOption("messy", "Bagunçado", "🌪️"),
)

ACCESSORIES: Tuple[StyleOption, ...] = (
    StyleOption("none", "Nenhum", "❌"),
    StyleOption("glasses", "Óculos", "👓"),
    StyleOption("hat", "Chapéu", "🎩"),
    StyleOption("bow", "Laço", "🎀"),
    StyleOption("antenna", "Antena", "📡"),
)

PALETTE: Tuple[str, ...] = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
    "#F8BBD9", "#B2DFDB", "#FFE0B2", "#D1C4E9", "#FFCDD2",
)

# Keyed by AvatarConfig attribute name, in customizer display order.
TRAITS: Mapping[str, Tuple[StyleOption, ...]] = {
    "body_type": BODY_TYPES,
    "eye_style": EYE_STYLES,
    "mouth_style": MOUTH_STYLES,
    "hair_style": HAIR_STYLES,
    "accessory": ACCESSORIES,
}

COLOR_SLOTS: Tuple[str, ...] = ("body_color", "hair_color", "accessory_color")

DEFAULT_BODY_COLOR = "#4ECDC4"
DEFAULT_HAIR_COLOR = "#8B4513"
DEFAULT_ACCESSORY_COLOR = "#333333"

DEFAULTS: Mapping[str, str] = {
    "body_type": "sphere",
    "eye_style": "dots",
    "mouth_style": "smile",
    "hair_style": "straight",
    "accessory": "none",
    "body_color": DEFAULT_BODY_COLOR,
    "hair_color": DEFAULT_HAIR_COLOR,
    "accessory_color": DEFAULT_ACCESSORY_COLOR,
}


def options(trait: str) -> Tuple[StyleOption, ...]:
    """Return the options for ``trait``; raises ``KeyError`` for unknown traits."""

    return TRAITS[trait]


def option_ids(trait: str) -> Tuple[str, ...]:
    return tuple(option.id for option in options(trait))


def is_valid(trait: str, value: Any) -> bool:
    """Whether ``value`` is a catalog entry of ``trait`` (or a palette color for a color slot)."""

    if trait in COLOR_SLOTS:
        return value in PALETTE
    if trait not in TRAITS:
        return False
    return value in option_ids(trait)


def default_for(trait: str) -> str:
    return DEFAULTS[trait]


def as_dict() -> Dict[str, Any]:
    """JSON-ready listing used by the customizer UI."""

    return {
        "traits": {
            trait: [{"id": o.id, "label": o.label, "glyph": o.glyph} for o in values]
            for trait, values in TRAITS.items()
        },
        "palette": list(PALETTE),
        "colorSlots": list(COLOR_SLOTS),
        "defaults": dict(DEFAULTS),
    }
