"""Agent that proposes avatar customizations from a free-text description."""

from __future__ import annotations

import asyncio
import json
import logging
import re

from openai.types.shared import Reasoning
from pydantic import ValidationError

from agents import Agent, ModelSettings, Runner

from .. import catalog
from ..config import settings
from ..models.schemas import SuggestionReply, to_wire
from ..services.suggestions import DEFAULT_PROMPT, sanitize_suggestions

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class InvalidSuggestionReply(ValueError):
    """The model answered with something other than the requested JSON object."""


def _choices(trait: str) -> str:
    return "|".join(catalog.option_ids(trait))


def build_suggestion_prompt(prompt: str) -> str:
    """Wrap the user's description in the fixed JSON-only instruction template."""

    description = (prompt or "").strip() or DEFAULT_PROMPT
    return (
        "Faça sugestões de personalização para um avatar 3D cartoon/fofo baseado na "
        f"seguinte descrição: {description}.\n"
        "Responda apenas com um JSON válido no formato:\n"
        "{\n"
        '  "suggestions": {\n'
        f'    "bodyType": "{_choices("body_type")}",\n'
        f'    "eyeStyle": "{_choices("eye_style")}",\n'
        f'    "mouthStyle": "{_choices("mouth_style")}",\n'
        f'    "hairStyle": "{_choices("hair_style")}",\n'
        f'    "accessory": "{_choices("accessory")}",\n'
        '    "bodyColor": "#hex_color",\n'
        '    "hairColor": "#hex_color",\n'
        '    "accessoryColor": "#hex_color"\n'
        "  },\n"
        '  "description": "Breve descrição do avatar sugerido"\n'
        "}"
    )


def parse_suggestion_reply(text: object) -> SuggestionReply:
    """Validate the model's raw text as a suggestion reply."""

    if not isinstance(text, str) or not text.strip():
        raise InvalidSuggestionReply("empty reply")

    candidate = text.strip()
    fenced = _FENCE.match(candidate)
    if fenced:
        candidate = fenced.group(1)

    try:
        data = json.loads(candidate)
        reply = SuggestionReply.model_validate(data)
    except (ValueError, ValidationError) as exc:
        raise InvalidSuggestionReply(str(exc)) from exc

    return SuggestionReply(
        suggestions=to_wire(sanitize_suggestions(reply.suggestions)),
        description=reply.description,
    )


avatar_suggestion_agent = Agent(
    name="Avatar Suggestion Agent",
    instructions=(
        "You design cute cartoon avatars. Reply with a single JSON object and nothing else, "
        "using only the values offered in the request."
    ),
    tools=[],
    model=settings.suggestions_model,
    model_settings=ModelSettings(
        reasoning=Reasoning(effort="minimal"),
        verbosity="low",
    ),
)


async def generate_suggestions(prompt: str) -> SuggestionReply:
    """Ask the agent for suggestions; raises ``InvalidSuggestionReply`` on unusable output."""

    result = await Runner.run(avatar_suggestion_agent, input=build_suggestion_prompt(prompt))
    final_output = getattr(result, "final_output", None)
    try:
        return parse_suggestion_reply(final_output)
    except InvalidSuggestionReply:
        logger.error("Failed to parse suggestion reply: %r", final_output)
        raise


async def main() -> None:  # pragma: no cover - manual utility
    reply = await generate_suggestions("Um robô feliz com antena")
    print(reply.model_dump_json(indent=2))


if __name__ == "__main__":  # pragma: no cover - manual utility
    asyncio.run(main())
