"""Media understanding configuration - prompts, models, limits and defaults."""

from __future__ import annotations

from .defaults import (
    CAPABILITY_MIME_PREFIXES,
    CAPABILITY_NAMES,
    DEFAULT_ATTACHMENT_MODE,
    DEFAULT_MAX_ATTACHMENTS_ALL,
    DEFAULT_MAX_BYTES,
    DEFAULT_PROMPTS,
    DEFAULT_PROVIDER_MODELS,
    DEFAULT_TIMEOUT_SECONDS,
    default_model_for,
)
from . import providers

__all__ = [
    "CAPABILITY_MIME_PREFIXES",
    "CAPABILITY_NAMES",
    "DEFAULT_ATTACHMENT_MODE",
    "DEFAULT_MAX_ATTACHMENTS_ALL",
    "DEFAULT_MAX_BYTES",
    "DEFAULT_PROMPTS",
    "DEFAULT_PROVIDER_MODELS",
    "DEFAULT_TIMEOUT_SECONDS",
    "default_model_for",
    "providers",
]
