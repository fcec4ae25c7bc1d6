"""Customizer panel: discrete trait selection, palette colors and randomize."""
from __future__ import annotations

import logging
import random
from typing import Callable, Optional

from . import catalog
from .models.schemas import AvatarConfig, field_for

logger = logging.getLogger(__name__)

ChangeListener = Callable[[AvatarConfig], None]


class CustomizerPanel:
    """Holds the configuration being edited and applies user selections to it."""

    def __init__(
        self,
        config: Optional[AvatarConfig] = None,
        on_change: Optional[ChangeListener] = None,
    ) -> None:
        self._config = config or AvatarConfig()
        self._on_change = on_change

    @property
    def config(self) -> AvatarConfig:
        return self._config

    def replace(self, config: AvatarConfig) -> AvatarConfig:
        """Swap in a whole configuration in one step and notify the listener."""

        self._config = config
        if self._on_change is not None:
            self._on_change(config)
        return config

    def select(self, trait: str, value: str) -> AvatarConfig:
        name = field_for(trait)
        if name not in catalog.TRAITS:
            raise ValueError(f"Unknown trait: {trait}")
        if not catalog.is_valid(name, value):
            raise ValueError(f"Unknown {name} value: {value}")
        return self.replace(self._config.model_copy(update={name: value}))

    def pick_color(self, slot: str, color: str) -> AvatarConfig:
        name = field_for(slot)
        if name not in catalog.COLOR_SLOTS:
            raise ValueError(f"Unknown color slot: {slot}")
        if color not in catalog.PALETTE:
            raise ValueError(f"Color {color} is not in the palette")
        return self.replace(self._config.model_copy(update={name: color}))

    def randomize(self, rng: Optional[random.Random] = None) -> AvatarConfig:
        """Draw every trait and color slot independently and apply them together."""

        rng = rng or random.Random()
        values = {trait: rng.choice(catalog.option_ids(trait)) for trait in catalog.TRAITS}
        values.update({slot: rng.choice(catalog.PALETTE) for slot in catalog.COLOR_SLOTS})
        logger.debug("Randomized avatar: %s", values)
        return self.replace(AvatarConfig(**values))
