"""Pydantic models describing the avatar configuration and API payloads."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .. import catalog


class AvatarConfig(BaseModel):
    """The eight-field record describing one avatar's appearance.

    Trait fields are plain strings rather than enums: values outside the
    catalog are tolerated here and resolved to the trait default at render
    time.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    body_type: str = catalog.DEFAULTS["body_type"]
    eye_style: str = catalog.DEFAULTS["eye_style"]
    mouth_style: str = catalog.DEFAULTS["mouth_style"]
    hair_style: str = catalog.DEFAULTS["hair_style"]
    accessory: str = catalog.DEFAULTS["accessory"]
    body_color: str = catalog.DEFAULTS["body_color"]
    hair_color: str = catalog.DEFAULTS["hair_color"]
    accessory_color: str = catalog.DEFAULTS["accessory_color"]

    @classmethod
    def from_partial(cls, data: Optional[Mapping[str, Any]]) -> "AvatarConfig":
        """Merge an untrusted partial record over the default configuration."""

        return cls().merged(data)

    def merged(self, partial: Optional[Mapping[str, Any]]) -> "AvatarConfig":
        """Return a copy with every known string field of ``partial`` applied.

        Unknown keys and non-string values are dropped so that malformed
        stored records and model replies never raise.
        """

        if not isinstance(partial, Mapping):
            return self
        updates: Dict[str, str] = {}
        for key, value in partial.items():
            name = field_for(key)
            if name is not None and isinstance(value, str):
                updates[name] = value
        if not updates:
            return self
        return self.model_copy(update=updates)

    def to_record(self) -> Dict[str, str]:
        """CamelCase JSON dict, the shape used in storage and on the wire."""

        return self.model_dump(by_alias=True)


_ALIASES: Dict[str, str] = {
    info.alias or name: name for name, info in AvatarConfig.model_fields.items()
}


def field_for(key: Any) -> Optional[str]:
    """Map a wire (camelCase) or attribute name to the attribute name."""

    if not isinstance(key, str):
        return None
    if key in AvatarConfig.model_fields:
        return key
    return _ALIASES.get(key)


def to_wire(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename attribute-name keys to their camelCase wire names."""

    return {AvatarConfig.model_fields[name].alias or name: value for name, value in fields.items()}


class SuggestionRequest(BaseModel):
    """Body of the suggestion endpoint."""

    prompt: str = Field(default="", description="Free-text description of the desired avatar")


class SuggestionReply(BaseModel):
    """Constrained JSON reply produced by the suggestion model."""

    suggestions: Dict[str, Any] = Field(..., description="Partial configuration keyed by wire name")
    description: str = Field(default="", description="Short description of the suggested avatar")


class SceneRequest(BaseModel):
    """Ask the resolver for a shape tree."""

    config: Dict[str, Any] = Field(default_factory=dict, description="Partial configuration, camelCase keys")
    seed: Optional[int] = Field(default=None, description="Seed for randomized styles such as messy hair")
    dark: bool = Field(default=False, description="Dark display mode; only changes lighting")


class SceneResponse(BaseModel):
    config: Dict[str, str]
    shapes: List[Dict[str, Any]]
    lighting: Dict[str, Any]


class AvatarResponse(BaseModel):
    """Stored configuration for the authenticated user."""

    user_id: str
    config: Dict[str, str]
    stored: bool = Field(default=False, description="False when the default configuration was returned")
