"""Capability Resolver - decide whether a capability runs and which candidates to try."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.providers.base import Capability
from core.providers.registry import ProviderRegistry
from features.media_understanding.config import CapabilityConfig

logger = logging.getLogger(__name__)

REASON_DISABLED = "disabled by configuration"
REASON_CONFIGURED_UNAVAILABLE = "configured providers unavailable"
REASON_NO_PROVIDER = "no provider declares capability"
REASON_NO_ELIGIBLE_PROVIDER = "no eligible provider"


@dataclass(frozen=True, slots=True)
class Candidate:
    """A ``(provider, model)`` pair the runner is willing to try."""

    provider: str
    model: str | None = None


@dataclass(frozen=True, slots=True)
class Resolution:
    enabled: bool
    candidates: tuple[Candidate, ...] = ()
    reason: str = ""
    notes: tuple[str, ...] = ()


def _explicit_candidates(
    capability: Capability,
    config: CapabilityConfig,
    registry: ProviderRegistry,
) -> tuple[tuple[Candidate, ...], tuple[str, ...]]:
    candidates: list[Candidate] = []
    notes: list[str] = []
    for entry in config.models:
        if entry.provider not in registry:
            notes.append(f"provider '{entry.provider}' is not registered")
            continue
        if not registry.supports(entry.provider, capability):
            notes.append(f"provider '{entry.provider}' does not support {capability.value}")
            continue
        candidates.append(Candidate(provider=entry.provider, model=entry.model))
    return tuple(candidates), tuple(notes)


def _auto_candidates(
    capability: Capability,
    config: CapabilityConfig,
    registry: ProviderRegistry,
) -> tuple[tuple[Candidate, ...], tuple[str, ...]]:
    candidates: list[Candidate] = []
    notes: list[str] = []
    credentialed = config.credentialed_providers
    for provider_id in registry.providers_for(capability):
        if credentialed is not None and provider_id not in credentialed:
            notes.append(f"provider '{provider_id}' has no credentials")
            continue
        candidates.append(Candidate(provider=provider_id))
    return tuple(candidates), tuple(notes)


def resolve_capability(
    capability: Capability | str,
    config: CapabilityConfig,
    registry: ProviderRegistry,
) -> Resolution:
    """Return whether ``capability`` is enabled and the ordered candidates to try.

    Explicit ``models`` are used verbatim after dropping providers that are
    unknown or lack the capability. Otherwise every registered provider
    declaring the capability is a candidate, in registration order, with the
    model left unset.
    """

    resolved = Capability.parse(capability)

    if config.enabled is False:
        return Resolution(enabled=False, reason=REASON_DISABLED)

    if config.models:
        candidates, notes = _explicit_candidates(resolved, config, registry)
        if not candidates:
            logger.warning(
                "No configured %s provider is available: %s", resolved.value, "; ".join(notes)
            )
            return Resolution(enabled=False, reason=REASON_CONFIGURED_UNAVAILABLE, notes=notes)
        if notes:
            logger.info("Dropped %s model entries: %s", resolved.value, "; ".join(notes))
        return Resolution(enabled=True, candidates=candidates, notes=notes)

    candidates, notes = _auto_candidates(resolved, config, registry)
    if not candidates:
        if config.enabled is True:
            logger.warning(
                "%s is enabled but no eligible provider is registered", resolved.value
            )
            return Resolution(enabled=False, reason=REASON_NO_ELIGIBLE_PROVIDER, notes=notes)
        return Resolution(enabled=False, reason=REASON_NO_PROVIDER, notes=notes)
    return Resolution(enabled=True, candidates=candidates, notes=notes)


__all__ = [
    "Candidate",
    "REASON_CONFIGURED_UNAVAILABLE",
    "REASON_DISABLED",
    "REASON_NO_ELIGIBLE_PROVIDER",
    "REASON_NO_PROVIDER",
    "Resolution",
    "resolve_capability",
]
