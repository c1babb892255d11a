"""Settings models describing providers and media capability configuration."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderSettings(BaseModel):
    """Credentials and endpoint overrides for one provider."""

    model_config = ConfigDict(extra="allow")

    api_key: str | None = None
    base_url: str | None = None

    @property
    def has_credentials(self) -> bool:
        return bool((self.api_key or "").strip())


class ModelEntrySettings(BaseModel):
    """Explicit ``provider``/``model`` pair configured for a capability."""

    model_config = ConfigDict(extra="forbid")

    provider: str
    model: str | None = None

    @field_validator("provider")
    @classmethod
    def _normalise_provider(cls, value: str) -> str:
        provider = value.strip()
        if not provider:
            raise ValueError("provider must not be empty")
        return provider

    @field_validator("model")
    @classmethod
    def _normalise_model(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class AttachmentPolicySettings(BaseModel):
    """How many matching attachments a capability run should process."""

    model_config = ConfigDict(extra="forbid")

    mode: Literal["first", "all"] | None = None
    max_attachments: int | None = Field(default=None, ge=1)


class CapabilityLayer(BaseModel):
    """One configuration layer; unset fields inherit from the layer below."""

    model_config = ConfigDict(extra="allow")

    enabled: bool | None = None
    models: List[ModelEntrySettings] | None = None
    prompt: str | None = None
    language: str | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)
    max_bytes: int | None = Field(default=None, ge=1)
    attachments: AttachmentPolicySettings | None = None


class MediaSettings(BaseModel):
    """Global defaults plus per-capability overrides."""

    model_config = ConfigDict(extra="forbid")

    defaults: CapabilityLayer = Field(default_factory=CapabilityLayer)
    audio: CapabilityLayer = Field(default_factory=CapabilityLayer)
    image: CapabilityLayer = Field(default_factory=CapabilityLayer)
    video: CapabilityLayer = Field(default_factory=CapabilityLayer)


class GatewaySettings(BaseModel):
    """Configuration consumed by the media understanding core."""

    model_config = ConfigDict(extra="allow")

    providers: Dict[str, ProviderSettings] = Field(default_factory=dict)
    media: MediaSettings = Field(default_factory=MediaSettings)


__all__ = [
    "AttachmentPolicySettings",
    "CapabilityLayer",
    "GatewaySettings",
    "MediaSettings",
    "ModelEntrySettings",
    "ProviderSettings",
]
