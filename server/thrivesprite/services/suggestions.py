"""HTTP client for the avatar suggestion endpoint."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .. import catalog
from ..config import settings
from ..models.schemas import AvatarConfig, field_for

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Crie um avatar fofo e divertido"


class SuggestionError(RuntimeError):
    """Any failure to obtain usable suggestions."""


@dataclass
class SuggestionResult:
    suggestions: Dict[str, str] = field(default_factory=dict)
    description: str = ""


def sanitize_suggestions(raw: Any) -> Dict[str, str]:
    """Keep known fields with string values; trait values must come from the catalog.

    Keys are returned as attribute names.
    """

    if not isinstance(raw, dict):
        return {}
    cleaned: Dict[str, str] = {}
    for key, value in raw.items():
        name = field_for(key)
        if name is None or not isinstance(value, str) or not value.strip():
            continue
        if name in catalog.TRAITS and not catalog.is_valid(name, value):
            logger.debug("Dropping suggested %s=%r outside the catalog", name, value)
            continue
        cleaned[name] = value.strip()
    return cleaned


def apply_suggestions(config: AvatarConfig, result: SuggestionResult) -> AvatarConfig:
    """Overwrite only the fields present in the reply."""

    return config.merged(result.suggestions)


class SuggestionGateway:
    """Forward a free-text prompt to the suggestion endpoint and validate the reply."""

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._endpoint_url = endpoint_url or settings.suggestions_url
        self._api_key = api_key if api_key is not None else settings.suggestions_api_key
        self._timeout = timeout or settings.suggestions_timeout
        self._transport = transport

    async def suggest(self, prompt: str) -> SuggestionResult:
        """POST the prompt; any non-2xx, transport or parse problem raises ``SuggestionError``."""

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        body = {"prompt": (prompt or "").strip() or DEFAULT_PROMPT}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(self._endpoint_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Suggestion request to %s failed: %s", self._endpoint_url, exc)
            raise SuggestionError("Suggestion endpoint unreachable") from exc

        if not resp.is_success:
            logger.warning("Suggestion endpoint returned %s: %s", resp.status_code, resp.text[:200])
            raise SuggestionError(f"Suggestion endpoint returned {resp.status_code}")

        try:
            data = json.loads(resp.text)
        except ValueError as exc:
            logger.warning("Suggestion endpoint returned a non-JSON body")
            raise SuggestionError("Suggestion reply is not valid JSON") from exc

        if not isinstance(data, dict) or not isinstance(data.get("suggestions"), dict):
            logger.warning("Suggestion reply missing a suggestions object: %r", data)
            raise SuggestionError("Suggestion reply has no suggestions")

        description = data.get("description")
        return SuggestionResult(
            suggestions=sanitize_suggestions(data["suggestions"]),
            description=description if isinstance(description, str) else "",
        )
