"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GenerateTextRequest(BaseModel):
    text: str = Field(default="", description="Text to extrude")
    color: str = Field(default="#4285f4", description="Hex color (#rrggbb or #rgb)")
    depth: int = Field(default=3, ge=1, le=10, description="Extrusion depth, 1-10")
    gloss: int = Field(default=4, ge=0, le=10, description="Glossiness, 0-10")
