"""Provider Registry - startup registration of media understanding providers
This module is the central registration point for the provider integrations
shipped with the gateway.

Registration Flow:
    1. ``create_default_registry`` instantiates each integration with the
       credentials supplied by configuration (or the environment)
    2. Each integration hands an immutable ``ProviderDescriptor`` to the registry
    3. Registration order is kept; auto-selection relies on it

Usage Example:
    registry = create_default_registry(settings.providers)
    result = await run_capability("audio", config, context, attachments, registry)

See Also:
    - core/providers/base.py: Descriptor and request/result types
    - core/providers/registry.py: Registry implementation
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from core.providers.base import (
    Capability,
    MediaRequest,
    MediaResult,
    ProviderDescriptor,
)
from core.providers.media import (
    DeepgramMediaProvider,
    GeminiMediaProvider,
    OpenAIMediaProvider,
)
from core.providers.registry import ProviderRegistry, build_provider_registry

logger = logging.getLogger(__name__)

# Registration order doubles as the auto-selection priority.
DEFAULT_PROVIDER_ORDER = ("openai", "gemini", "deepgram")


def _setting(settings: Mapping[str, Any] | None, provider_id: str, field: str) -> Any:
    if not settings:
        return None
    entry = settings.get(provider_id)
    if entry is None:
        return None
    if isinstance(entry, Mapping):
        return entry.get(field)
    return getattr(entry, field, None)


def create_default_registry(
    provider_settings: Mapping[str, Any] | None = None,
) -> ProviderRegistry:
    """Build a registry holding the OpenAI, Gemini and Deepgram integrations."""

    integrations = {
        "openai": OpenAIMediaProvider(
            api_key=_setting(provider_settings, "openai", "api_key"),
            base_url=_setting(provider_settings, "openai", "base_url"),
        ),
        "gemini": GeminiMediaProvider(
            api_key=_setting(provider_settings, "gemini", "api_key"),
        ),
        "deepgram": DeepgramMediaProvider(
            api_key=_setting(provider_settings, "deepgram", "api_key"),
            base_url=_setting(provider_settings, "deepgram", "base_url"),
        ),
    }
    registry = build_provider_registry(
        integrations[name].descriptor() for name in DEFAULT_PROVIDER_ORDER
    )
    logger.info(
        "Provider registry initialised",
        extra={"providers": [descriptor.id for descriptor in registry]},
    )
    return registry


__all__ = [
    "Capability",
    "DEFAULT_PROVIDER_ORDER",
    "DeepgramMediaProvider",
    "GeminiMediaProvider",
    "MediaRequest",
    "MediaResult",
    "OpenAIMediaProvider",
    "ProviderDescriptor",
    "ProviderRegistry",
    "build_provider_registry",
    "create_default_registry",
]
