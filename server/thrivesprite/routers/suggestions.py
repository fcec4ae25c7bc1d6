"""AI suggestion endpoint."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..ai_agents.avatar_suggestions import InvalidSuggestionReply, generate_suggestions
from ..config import settings
from ..models import schemas
from .avatars import bearer_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["suggestions"])


def require_credential(token: Optional[str] = Depends(bearer_token)) -> str:
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer credential")
    if settings.suggestions_api_key and token != settings.suggestions_api_key:
        raise HTTPException(status_code=401, detail="Invalid bearer credential")
    return token


@router.post("/suggestions", response_model=schemas.SuggestionReply)
async def create_suggestions(
    payload: schemas.SuggestionRequest,
    _credential: str = Depends(require_credential),
):
    """Template the prompt, ask the model and return its validated JSON reply."""

    try:
        return await generate_suggestions(payload.prompt)
    except InvalidSuggestionReply:
        return JSONResponse(status_code=500, content={"error": "Invalid response format from AI"})
    except Exception as exc:
        logger.exception("Error generating avatar suggestions")
        return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})
