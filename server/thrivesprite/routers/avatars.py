"""Load and save the signed-in user's avatar."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException

from ..models import schemas
from ..services.identity import IdentityGateway
from ..services.supabase_persistence import (
    AuthenticationRequiredError,
    AvatarPersistence,
    PersistenceError,
)

router = APIRouter(prefix="/avatars", tags=["avatars"])


@lru_cache(maxsize=1)
def get_persistence() -> AvatarPersistence:
    return AvatarPersistence()


@lru_cache(maxsize=1)
def get_identity() -> IdentityGateway:
    return IdentityGateway()


def bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def current_user(
    token: Optional[str] = Depends(bearer_token),
    identity: IdentityGateway = Depends(get_identity),
) -> str:
    user_id = await identity.user_id_for_token(token) if token else None
    if not user_id:
        raise HTTPException(status_code=401, detail="You must sign in to access your avatar")
    return user_id


@router.get("/me", response_model=schemas.AvatarResponse)
async def load_avatar(
    user_id: str = Depends(current_user),
    persistence: AvatarPersistence = Depends(get_persistence),
) -> schemas.AvatarResponse:
    """Return the stored configuration, or the default one when nothing is stored."""

    stored = await persistence.load(user_id)
    config = stored or schemas.AvatarConfig()
    return schemas.AvatarResponse(user_id=user_id, config=config.to_record(), stored=stored is not None)


@router.put("/me", response_model=schemas.AvatarResponse)
async def save_avatar(
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(current_user),
    persistence: AvatarPersistence = Depends(get_persistence),
) -> schemas.AvatarResponse:
    """Replace the user's stored configuration with ``payload`` merged over defaults."""

    config = schemas.AvatarConfig.from_partial(payload)
    try:
        await persistence.save(user_id, config)
    except AuthenticationRequiredError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail="Could not save avatar") from exc
    return schemas.AvatarResponse(user_id=user_id, config=config.to_record(), stored=True)
