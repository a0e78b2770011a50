"""Event script models for the page builder CLI."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from pagebuilder.kernel.types import EVENT_TYPES

# Events whose payload may name a file instead of carrying a data URI
UPLOAD_EVENTS = {"image.upload", "background.image_set"}


class ScriptEvent(BaseModel):
    """One interaction in an event script."""

    model_config = {"extra": "forbid"}

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type")
    @classmethod
    def known_type(cls, v: str) -> str:
        if v not in EVENT_TYPES:
            raise ValueError(f"unknown event type: {v}")
        return v

    @property
    def needs_file(self) -> bool:
        return self.type in UPLOAD_EVENTS and "path" in self.payload


class EventScript(BaseModel):
    """A recorded editing session: what to type, pick, and toggle, in order."""

    model_config = {"extra": "forbid"}

    title: str = "A4 Page Builder"
    container_width: int | None = Field(default=None, gt=0)
    events: list[ScriptEvent] = Field(default_factory=list)
