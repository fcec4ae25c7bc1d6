from __future__ import annotations

import random

import pytest

from thrivesprite import catalog
from thrivesprite.customizer import CustomizerPanel
from thrivesprite.models.schemas import AvatarConfig


def test_select_sets_exactly_one_trait():
    panel = CustomizerPanel()
    before = panel.config
    after = panel.select("hairStyle", "curly")
    assert after.hair_style == "curly"
    assert after.model_copy(update={"hair_style": before.hair_style}) == before


def test_select_rejects_values_outside_the_catalog():
    panel = CustomizerPanel()
    with pytest.raises(ValueError):
        panel.select("hair_style", "mohawk")
    with pytest.raises(ValueError):
        panel.select("body_color", "#FF6B6B")
    assert panel.config == AvatarConfig()


def test_pick_color_uses_the_palette():
    panel = CustomizerPanel()
    assert panel.pick_color("accessoryColor", "#BB8FCE").accessory_color == "#BB8FCE"
    with pytest.raises(ValueError):
        panel.pick_color("hair_color", "#000001")
    with pytest.raises(ValueError):
        panel.pick_color("hair_style", "#BB8FCE")


def test_randomize_draws_every_field_from_its_catalog():
    panel = CustomizerPanel()
    rng = random.Random(7)
    for _ in range(50):
        config = panel.randomize(rng)
        for trait in catalog.TRAITS:
            assert catalog.is_valid(trait, getattr(config, trait))
        for slot in catalog.COLOR_SLOTS:
            assert getattr(config, slot) in catalog.PALETTE


def test_randomize_notifies_once_per_replacement():
    changes = []
    panel = CustomizerPanel(on_change=changes.append)
    config = panel.randomize(random.Random(1))
    assert changes == [config]
