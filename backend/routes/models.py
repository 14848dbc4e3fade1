"""Pydantic request bodies for API endpoints."""

from pydantic import BaseModel


class UpdateSettings(BaseModel):
    language: str | None = None
    pacing: str | None = None
    text_scene: str | None = None
    encounter: str | None = None


class SelectChoiceBody(BaseModel):
    option_id: str
