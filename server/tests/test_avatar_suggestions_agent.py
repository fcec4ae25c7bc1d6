from __future__ import annotations

import asyncio
import json

import pytest

from thrivesprite.ai_agents import avatar_suggestions
from thrivesprite.ai_agents.avatar_suggestions import (
    InvalidSuggestionReply,
    build_suggestion_prompt,
    parse_suggestion_reply,
)


class DummyResult:
    def __init__(self, final_output: object):
        self.final_output = final_output


def _run(coro):  # noqa: ANN001
    return asyncio.run(coro)


def test_prompt_template_lists_every_catalog():
    prompt = build_suggestion_prompt("um robô")
    assert "um robô" in prompt
    assert "sphere|cube|cylinder" in prompt
    assert "bald|straight|spiky|curly|ponytail|messy" in prompt
    assert "none|glasses|hat|bow|antenna" in prompt
    assert '"description"' in prompt


def test_parse_accepts_fenced_json_and_filters_fields():
    text = "```json\n" + json.dumps(
        {
            "suggestions": {"bodyType": "cylinder", "accessory": "jetpack", "extra": "x", "hairColor": "#FFEAA7"},
            "description": "Um cilindro",
        }
    ) + "\n```"
    reply = parse_suggestion_reply(text)
    assert reply.suggestions == {"bodyType": "cylinder", "hairColor": "#FFEAA7"}
    assert reply.description == "Um cilindro"


@pytest.mark.parametrize("text", [None, "", "not json", "[]", '{"description": "missing"}'])
def test_parse_rejects_malformed_output(text):  # noqa: ANN001
    with pytest.raises(InvalidSuggestionReply):
        parse_suggestion_reply(text)


def test_generate_suggestions_runs_the_agent(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    async def fake_run(agent, input):  # noqa: ANN001, A002
        seen["input"] = input
        return DummyResult('{"suggestions": {"eyeStyle": "sleepy"}, "description": "Sonolento"}')

    monkeypatch.setattr(avatar_suggestions.Runner, "run", fake_run)
    reply = _run(avatar_suggestions.generate_suggestions("preguiçoso"))

    assert reply.suggestions == {"eyeStyle": "sleepy"}
    assert "preguiçoso" in seen["input"]


def test_generate_suggestions_raises_on_bad_output(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_run(*args, **kwargs):  # noqa: ANN001, ANN002
        return DummyResult("Claro! Aqui está um avatar legal.")

    monkeypatch.setattr(avatar_suggestions.Runner, "run", fake_run)
    with pytest.raises(InvalidSuggestionReply):
        _run(avatar_suggestions.generate_suggestions("x"))
