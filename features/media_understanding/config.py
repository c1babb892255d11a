"""Collapse layered media settings into one immutable per-capability view.

Three layers feed a capability run: the built-in defaults from
``config.media``, the ``media.defaults`` layer of the gateway settings and the
capability's own layer. ``merge_capability_config`` is the only place that
reads them; the resolver and runner only ever see a ``CapabilityConfig``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from config.api_keys import load_api_keys
from config.media.defaults import (
    DEFAULT_ATTACHMENT_MODE,
    DEFAULT_MAX_BYTES,
    DEFAULT_PROMPTS,
    DEFAULT_TIMEOUT_SECONDS,
)
from core.exceptions import ConfigurationError
from core.providers.base import Capability
from core.utils.env import get_env
from features.media_understanding.schemas.settings import (
    CapabilityLayer,
    GatewaySettings,
    ProviderSettings,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ModelEntry:
    """Explicitly configured ``(provider, model)`` pair."""

    provider: str
    model: str | None = None


def _coerce_entry(entry: Any) -> ModelEntry:
    if isinstance(entry, ModelEntry):
        return entry
    if isinstance(entry, Mapping):
        provider, model = entry.get("provider"), entry.get("model")
    elif isinstance(entry, (list, tuple)) and len(entry) == 2:
        provider, model = entry
    else:
        raise ConfigurationError(f"Invalid model entry: {entry!r}", key="models")
    if not isinstance(provider, str) or not provider.strip():
        raise ConfigurationError(f"Model entry has no provider: {entry!r}", key="models")
    if model is not None and not isinstance(model, str):
        raise ConfigurationError(f"Model entry has a non-string model: {entry!r}", key="models")
    return ModelEntry(provider=provider.strip(), model=model)


@dataclass(frozen=True, slots=True)
class AttachmentPolicy:
    mode: str = DEFAULT_ATTACHMENT_MODE
    max_attachments: int | None = None


@dataclass(frozen=True)
class CapabilityConfig:
    """Merged configuration for one capability.

    ``enabled`` is tri-state: ``None`` means auto (enabled when a
    credentialed provider declares the capability). ``credentialed_providers``
    of ``None`` disables the credential filter.
    """

    enabled: bool | None = None
    models: tuple[ModelEntry, ...] = ()
    credentialed_providers: frozenset[str] | None = None
    prompt: str | None = None
    language: str | None = None
    timeout_seconds: float | None = None
    max_bytes: int | None = None
    attachments: AttachmentPolicy = field(default_factory=AttachmentPolicy)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "models",
            tuple(_coerce_entry(entry) for entry in self.models),
        )
        if self.credentialed_providers is not None:
            object.__setattr__(
                self, "credentialed_providers", frozenset(self.credentialed_providers)
            )


def coerce_settings(settings: GatewaySettings | Mapping[str, Any] | None) -> GatewaySettings:
    """Validate raw mappings into :class:`GatewaySettings`."""

    if settings is None:
        return GatewaySettings()
    if isinstance(settings, GatewaySettings):
        return settings
    try:
        return GatewaySettings.model_validate(dict(settings))
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid gateway settings: {exc}", key="media") from exc


def credentialed_provider_ids(
    providers: Mapping[str, ProviderSettings],
    env_keys: Mapping[str, str] | None = None,
) -> frozenset[str]:
    """Return ids of providers holding credentials in settings or the environment."""

    configured = {name for name, entry in providers.items() if entry.has_credentials}
    from_env = {name for name, key in (env_keys or {}).items() if (key or "").strip()}
    return frozenset(configured | from_env)


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def merge_capability_config(
    settings: GatewaySettings | Mapping[str, Any] | None,
    capability: Capability | str,
    *,
    env_keys: Mapping[str, str] | None = None,
) -> CapabilityConfig:
    """Collapse defaults, the global layer and the capability layer into one value."""

    resolved = Capability.parse(capability)
    gateway = coerce_settings(settings)
    base: CapabilityLayer = gateway.media.defaults
    layer: CapabilityLayer = getattr(gateway.media, resolved.value)

    raw_models = _first_set(layer.models, base.models) or []
    models = tuple(ModelEntry(provider=entry.provider, model=entry.model) for entry in raw_models)

    base_policy = base.attachments
    layer_policy = layer.attachments
    policy = AttachmentPolicy(
        mode=_first_set(
            layer_policy.mode if layer_policy else None,
            base_policy.mode if base_policy else None,
            DEFAULT_ATTACHMENT_MODE,
        ),
        max_attachments=_first_set(
            layer_policy.max_attachments if layer_policy else None,
            base_policy.max_attachments if base_policy else None,
        ),
    )

    keys = load_api_keys() if env_keys is None else env_keys
    merged = CapabilityConfig(
        enabled=_first_set(layer.enabled, base.enabled),
        models=models,
        credentialed_providers=credentialed_provider_ids(gateway.providers, keys),
        prompt=_first_set(layer.prompt, base.prompt, DEFAULT_PROMPTS[resolved.value]),
        language=_first_set(layer.language, base.language),
        timeout_seconds=_first_set(
            layer.timeout_seconds, base.timeout_seconds, DEFAULT_TIMEOUT_SECONDS[resolved.value]
        ),
        max_bytes=_first_set(layer.max_bytes, base.max_bytes, DEFAULT_MAX_BYTES[resolved.value]),
        attachments=policy,
    )
    logger.debug(
        "Merged %s capability config (enabled=%s, models=%s)",
        resolved.value,
        merged.enabled,
        [(entry.provider, entry.model) for entry in merged.models],
    )
    return merged


def load_gateway_settings(path: str | Path | None = None) -> GatewaySettings:
    """Read gateway settings from ``GATEWAY_CONFIG_PATH`` (JSON) when present."""

    source = path or get_env("GATEWAY_CONFIG_PATH")
    if not source:
        return GatewaySettings()

    config_path = Path(source)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"Gateway config file not found: {config_path}", key="GATEWAY_CONFIG_PATH"
        ) from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"Gateway config file is not valid JSON: {config_path}", key="GATEWAY_CONFIG_PATH"
        ) from exc
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            "Gateway config must be a JSON object", key="GATEWAY_CONFIG_PATH"
        )
    logger.info("Loaded gateway settings from %s", config_path)
    return coerce_settings(raw)


__all__ = [
    "AttachmentPolicy",
    "CapabilityConfig",
    "ModelEntry",
    "coerce_settings",
    "credentialed_provider_ids",
    "load_gateway_settings",
    "merge_capability_config",
]
