from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from thrivesprite.models.schemas import AvatarConfig
from thrivesprite.services.suggestions import (
    DEFAULT_PROMPT,
    SuggestionError,
    SuggestionGateway,
    SuggestionResult,
    apply_suggestions,
    sanitize_suggestions,
)


def _run(coro):  # noqa: ANN001
    return asyncio.run(coro)


def _gateway(handler, api_key: str = "test-key") -> SuggestionGateway:  # noqa: ANN001
    return SuggestionGateway(
        "https://suggest.test/suggestions",
        api_key,
        transport=httpx.MockTransport(handler),
    )


def test_suggest_posts_prompt_with_bearer_credential():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers.get("authorization")
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"suggestions": {"bodyType": "cube", "hairColor": "#F7DC6F"}, "description": "Um cubo feliz"},
        )

    result = _run(_gateway(handler).suggest("um cubo"))

    assert captured == {"auth": "Bearer test-key", "body": {"prompt": "um cubo"}}
    assert result.suggestions == {"body_type": "cube", "hair_color": "#F7DC6F"}
    assert result.description == "Um cubo feliz"


def test_blank_prompt_uses_default():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"suggestions": {}})

    _run(_gateway(handler).suggest("   "))
    assert bodies == [{"prompt": DEFAULT_PROMPT}]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "Gemini API error: 500"}),
        httpx.Response(401, json={"error": "unauthorized"}),
        httpx.Response(200, text="definitely not json"),
        httpx.Response(200, json=["suggestions"]),
        httpx.Response(200, json={"description": "no suggestions"}),
        httpx.Response(200, json={"suggestions": "cube"}),
    ],
)
def test_bad_replies_are_one_failure(response: httpx.Response):
    with pytest.raises(SuggestionError):
        _run(_gateway(lambda request: response).suggest("x"))


def test_transport_error_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SuggestionError):
        _run(_gateway(handler).suggest("x"))


def test_sanitize_drops_unknown_fields_and_off_catalog_values():
    cleaned = sanitize_suggestions(
        {
            "bodyType": "pyramid",
            "eyeStyle": "large",
            "wings": "yes",
            "hairColor": 7,
            "accessoryColor": "#123456",
        }
    )
    assert cleaned == {"eye_style": "large", "accessory_color": "#123456"}


def test_merge_only_overwrites_fields_in_the_reply():
    current = AvatarConfig(hair_style="curly", accessory="hat", body_color="#FF6B6B")
    merged = apply_suggestions(current, SuggestionResult({"body_type": "cube"}))
    assert merged == current.model_copy(update={"body_type": "cube"})


def test_empty_reply_leaves_configuration_unchanged():
    current = AvatarConfig(mouth_style="excited")
    assert apply_suggestions(current, SuggestionResult()) is current
