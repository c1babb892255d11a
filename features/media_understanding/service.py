"""High-level media understanding service binding settings to the provider registry."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from config.media.defaults import CAPABILITY_NAMES
from core.providers import create_default_registry
from core.providers.base import Capability
from core.providers.registry import ProviderRegistry
from features.media_understanding.attachments import MediaAttachment
from features.media_understanding.config import (
    CapabilityConfig,
    ModelEntry,
    coerce_settings,
    load_gateway_settings,
    merge_capability_config,
)
from features.media_understanding.decision import RunResult
from features.media_understanding.resolver import resolve_capability
from features.media_understanding.runner import CapabilityContext, run_capability
from features.media_understanding.schemas.settings import GatewaySettings

logger = logging.getLogger(__name__)


class MediaUnderstandingService:
    """Run media capabilities using one settings snapshot and one registry."""

    def __init__(
        self,
        *,
        registry: ProviderRegistry,
        settings: GatewaySettings | Mapping[str, Any] | None = None,
        env_keys: Mapping[str, str] | None = None,
    ) -> None:
        self._registry = registry
        self._settings = coerce_settings(settings)
        self._env_keys = env_keys

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def settings(self) -> GatewaySettings:
        return self._settings

    def capability_config(
        self,
        capability: Capability | str,
        *,
        models: Sequence[ModelEntry] | None = None,
    ) -> CapabilityConfig:
        """Return the merged config, optionally replacing the explicit model list."""

        config = merge_capability_config(self._settings, capability, env_keys=self._env_keys)
        if models:
            config = dataclasses.replace(config, models=tuple(models))
        return config

    async def run(
        self,
        capability: Capability | str,
        attachments: Iterable[MediaAttachment] | None,
        *,
        context: CapabilityContext | None = None,
        models: Sequence[ModelEntry] | None = None,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
        concurrent: bool = False,
    ) -> RunResult:
        config = self.capability_config(capability, models=models)
        return await run_capability(
            capability,
            config,
            context,
            attachments,
            self._registry,
            cancel_event=cancel_event,
            timeout=timeout,
            concurrent=concurrent,
        )

    def describe_capabilities(self) -> List[Dict[str, Any]]:
        """Return the resolution of every capability for debug tooling."""

        overview: List[Dict[str, Any]] = []
        for name in CAPABILITY_NAMES:
            config = self.capability_config(name)
            resolution = resolve_capability(name, config, self._registry)
            overview.append(
                {
                    "capability": name,
                    "enabled": resolution.enabled,
                    "configured_enabled": config.enabled,
                    "reason": resolution.reason,
                    "notes": list(resolution.notes),
                    "candidates": [
                        {"provider": candidate.provider, "model": candidate.model}
                        for candidate in resolution.candidates
                    ],
                    "providers": self._registry.providers_for(name),
                }
            )
        return overview


def build_default_service() -> MediaUnderstandingService:
    """Create a service from ``GATEWAY_CONFIG_PATH`` and the built-in integrations."""

    settings = load_gateway_settings()
    registry = create_default_registry(settings.providers)
    logger.info("Media understanding service ready (%s providers)", len(registry))
    return MediaUnderstandingService(registry=registry, settings=settings)


__all__ = ["MediaUnderstandingService", "build_default_service"]
