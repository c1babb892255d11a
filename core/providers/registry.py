"""Provider Registry - capability aware lookup and dispatch of media providers.

The registry is filled once at startup and is read-only afterwards, so a
single instance can be shared by any number of concurrent capability runs.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterable, Iterator, List, Tuple

from config.media.defaults import default_model_for
from core.exceptions import ConfigurationError, ProviderError
from core.providers.base import (
    Capability,
    InvokeFn,
    MediaRequest,
    MediaResult,
    ProviderDescriptor,
)

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Ordered mapping of provider id -> descriptor."""

    def __init__(self) -> None:
        self._descriptors: Dict[str, ProviderDescriptor] = {}
        self._handlers: Dict[Tuple[str, Capability], InvokeFn] = {}

    def register(self, descriptor: ProviderDescriptor) -> ProviderDescriptor:
        """Validate and store ``descriptor``; returns the stored copy."""

        provider_id = (descriptor.id or "").strip()
        if not provider_id:
            raise ConfigurationError("Provider id must not be empty", key="providers")
        if provider_id in self._descriptors:
            raise ConfigurationError(
                f"Provider {provider_id} already registered",
                key=f"providers.{provider_id}",
            )

        handlers: Dict[Tuple[str, Capability], InvokeFn] = {}
        for capability in descriptor.capabilities:
            fn = descriptor.function_for(capability)
            if fn is None:
                raise ConfigurationError(
                    f"Provider {provider_id} declares {capability.value} without an invocation function",
                    key=f"providers.{provider_id}.{capability.value}",
                )
            handlers[(provider_id, capability)] = fn

        defaults = dict(descriptor.default_models)
        for capability in descriptor.capabilities:
            if capability not in defaults:
                fallback = default_model_for(provider_id, capability.value)
                if fallback:
                    defaults[capability] = fallback
        stored = dataclasses.replace(descriptor, id=provider_id, default_models=defaults)

        self._descriptors[provider_id] = stored
        self._handlers.update(handlers)
        logger.debug(
            "Registered media provider: %s (capabilities=%s)",
            provider_id,
            sorted(c.value for c in stored.capabilities),
        )
        return stored

    def get(self, provider_id: str) -> ProviderDescriptor | None:
        return self._descriptors.get(provider_id)

    def providers_for(self, capability: Capability | str) -> List[str]:
        """Return provider ids declaring ``capability`` in registration order."""

        resolved = Capability.parse(capability)
        return [
            provider_id
            for provider_id, descriptor in self._descriptors.items()
            if resolved in descriptor.capabilities
        ]

    def supports(self, provider_id: str, capability: Capability | str) -> bool:
        return (provider_id, Capability.parse(capability)) in self._handlers

    async def invoke(
        self,
        provider_id: str,
        capability: Capability | str,
        request: MediaRequest,
    ) -> MediaResult:
        """Dispatch ``request`` to the provider's function for ``capability``."""

        resolved = Capability.parse(capability)
        handler = self._handlers.get((provider_id, resolved))
        if handler is None:
            raise ProviderError(
                f"Provider {provider_id} does not support {resolved.value}",
                provider=provider_id,
                kind="unsupported",
            )
        return await handler(request)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._descriptors

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(list(self._descriptors.values()))

    def __len__(self) -> int:
        return len(self._descriptors)


def build_provider_registry(descriptors: Iterable[ProviderDescriptor]) -> ProviderRegistry:
    """Return a registry holding ``descriptors`` in the supplied order."""

    registry = ProviderRegistry()
    for descriptor in descriptors:
        registry.register(descriptor)
    return registry


__all__ = ["ProviderRegistry", "build_provider_registry"]
