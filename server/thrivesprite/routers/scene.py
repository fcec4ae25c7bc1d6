"""Catalog listing and shape-tree resolution endpoints."""
from __future__ import annotations

import random
from typing import Any, Dict

from fastapi import APIRouter

from .. import catalog
from ..geometry.resolver import resolve
from ..geometry.shapes import scene_payload
from ..models import schemas
from ..render.surface import lighting_for

router = APIRouter(tags=["scene"])


@router.get("/catalog")
async def get_catalog() -> Dict[str, Any]:
    """Selectable values per trait, in display order, plus the color palette."""

    return catalog.as_dict()


@router.post("/scene", response_model=schemas.SceneResponse)
async def resolve_scene(payload: schemas.SceneRequest) -> schemas.SceneResponse:
    """Resolve a (partial) configuration into primitive shapes and lighting."""

    config = schemas.AvatarConfig.from_partial(payload.config)
    rng = random.Random(payload.seed) if payload.seed is not None else None
    return schemas.SceneResponse(
        config=config.to_record(),
        shapes=scene_payload(resolve(config, rng)),
        lighting=lighting_for(payload.dark).to_dict(),
    )
