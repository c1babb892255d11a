"""Response models for the media understanding routes."""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


class CapabilityOutputPayload(BaseModel):
    capability: str
    attachment_index: int
    text: str
    provider: str
    model: str | None = None
    language: str | None = None
    filename: str | None = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DecisionPayload(BaseModel):
    """Serialised decision record."""

    capability: str
    outcome: Literal["success", "disabled", "unavailable", "error"]
    reason: str = ""
    provider: str | None = None
    model: str | None = None
    attempts: List[Dict[str, Any]] = Field(default_factory=list)
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
    cancelled: bool = False


class CapabilityRunResponse(BaseModel):
    outputs: List[CapabilityOutputPayload] = Field(default_factory=list)
    decision: DecisionPayload
    attachment_count: int = 0
    failed_count: int = 0
    partial: bool = False


class CapabilityStatus(BaseModel):
    capability: str
    enabled: bool
    configured_enabled: bool | None = None
    reason: str = ""
    notes: List[str] = Field(default_factory=list)
    candidates: List[Dict[str, Any]] = Field(default_factory=list)
    providers: List[str] = Field(default_factory=list)


__all__ = [
    "CapabilityOutputPayload",
    "CapabilityRunResponse",
    "CapabilityStatus",
    "DecisionPayload",
]
