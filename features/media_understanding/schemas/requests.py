"""Request models for the media understanding routes."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from features.media_understanding.schemas.settings import ModelEntrySettings


class CapabilityRunRequest(BaseModel):
    """Form fields accompanying uploaded attachments."""

    model_config = ConfigDict(extra="forbid")

    models: List[ModelEntrySettings] = Field(default_factory=list)
    channel: str | None = None
    sender_id: str | None = None
    session_id: str | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)
    concurrent: bool = False


__all__ = ["CapabilityRunRequest"]
