"""Base Provider Types - Contracts Shared by Media Understanding Providers
This module defines the request/result containers and the immutable provider
descriptor that every provider integration hands to the registry.

Design Pattern:
    - One async invocation function per capability (``transcribe_audio``,
      ``describe_image``, ``describe_video``)
    - Descriptors are frozen dataclasses built once at startup
    - The registry builds its capability -> function table from the
      descriptor at registration time, so dispatch never probes attributes
      by string at request time

Provider Lifecycle:
    1. Integration builds a ``ProviderDescriptor`` (see ``descriptor()`` on
       the classes in core/providers/media/)
    2. ``ProviderRegistry.register`` validates and stores it
    3. The capability runner invokes it via ``ProviderRegistry.invoke``
    4. The provider returns a ``MediaResult`` echoing the model it used

See Also:
    - core/providers/registry.py: Registration and dispatch
    - features/media_understanding/runner.py: Candidate iteration
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping


class Capability(str, Enum):
    """Named category of media understanding work."""

    AUDIO = "audio"
    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def parse(cls, value: "Capability | str") -> "Capability":
        if isinstance(value, Capability):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True, slots=True)
class MediaRequest:
    """Capability specific request handed to a provider invocation function."""

    data: bytes
    filename: str | None = None
    mime_type: str | None = None
    model: str | None = None
    prompt: str | None = None
    language: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MediaResult:
    """Normalised provider response; ``model`` is the model actually used."""

    text: str
    model: str | None = None
    provider: str | None = None
    language: str | None = None
    metadata: Mapping[str, Any] | None = None


InvokeFn = Callable[[MediaRequest], Awaitable[MediaResult]]

# Descriptor attribute holding the invocation function for each capability
CAPABILITY_FUNCTIONS: Mapping[Capability, str] = {
    Capability.AUDIO: "transcribe_audio",
    Capability.IMAGE: "describe_image",
    Capability.VIDEO: "describe_video",
}


@dataclass(frozen=True)
class ProviderDescriptor:
    """Immutable description of one provider backend."""

    id: str
    capabilities: frozenset[Capability] = frozenset()
    transcribe_audio: InvokeFn | None = None
    describe_image: InvokeFn | None = None
    describe_video: InvokeFn | None = None
    default_models: Mapping[Capability, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Accept plain strings from callers building descriptors by hand.
        object.__setattr__(
            self, "capabilities", frozenset(Capability.parse(c) for c in self.capabilities)
        )
        object.__setattr__(
            self,
            "default_models",
            MappingProxyType(
                {Capability.parse(key): value for key, value in dict(self.default_models).items()}
            ),
        )

    def function_for(self, capability: Capability) -> InvokeFn | None:
        return getattr(self, CAPABILITY_FUNCTIONS[capability])

    def default_model(self, capability: Capability) -> str | None:
        return self.default_models.get(capability)


__all__ = [
    "CAPABILITY_FUNCTIONS",
    "Capability",
    "InvokeFn",
    "MediaRequest",
    "MediaResult",
    "ProviderDescriptor",
]
