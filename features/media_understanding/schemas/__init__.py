"""Pydantic schemas for the media understanding feature."""

from .requests import CapabilityRunRequest
from .responses import (
    CapabilityOutputPayload,
    CapabilityRunResponse,
    CapabilityStatus,
    DecisionPayload,
)
from .settings import (
    AttachmentPolicySettings,
    CapabilityLayer,
    GatewaySettings,
    MediaSettings,
    ModelEntrySettings,
    ProviderSettings,
)

__all__ = [
    "AttachmentPolicySettings",
    "CapabilityLayer",
    "CapabilityOutputPayload",
    "CapabilityRunRequest",
    "CapabilityRunResponse",
    "CapabilityStatus",
    "DecisionPayload",
    "GatewaySettings",
    "MediaSettings",
    "ModelEntrySettings",
    "ProviderSettings",
]
