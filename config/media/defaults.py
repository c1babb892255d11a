"""Media understanding defaults shared by the registry and the capability merge."""

from __future__ import annotations

from typing import Dict, Mapping

from .prompts import DEFAULT_AUDIO_PROMPT, DEFAULT_IMAGE_PROMPT, DEFAULT_VIDEO_PROMPT
from .providers import deepgram, gemini, openai

CAPABILITY_NAMES = ("audio", "image", "video")

# Mime type prefixes accepted for each capability
CAPABILITY_MIME_PREFIXES: Dict[str, str] = {
    "audio": "audio/",
    "image": "image/",
    "video": "video/",
}

DEFAULT_PROMPTS: Dict[str, str] = {
    "audio": DEFAULT_AUDIO_PROMPT,
    "image": DEFAULT_IMAGE_PROMPT,
    "video": DEFAULT_VIDEO_PROMPT,
}

DEFAULT_MAX_BYTES: Dict[str, int] = {
    "audio": 20 * 1024 * 1024,
    "image": 10 * 1024 * 1024,
    "video": 50 * 1024 * 1024,
}

DEFAULT_TIMEOUT_SECONDS: Dict[str, float] = {
    "audio": 60.0,
    "image": 60.0,
    "video": 120.0,
}

DEFAULT_ATTACHMENT_MODE = "first"
# Cap for mode "all" when the config leaves max_attachments unset
DEFAULT_MAX_ATTACHMENTS_ALL = 8

# Model a provider is asked for when auto-selection leaves the model unset
DEFAULT_PROVIDER_MODELS: Dict[str, Mapping[str, str]] = {
    "openai": {
        "audio": openai.DEFAULT_TRANSCRIBE_MODEL,
        "image": openai.DEFAULT_VISION_MODEL,
    },
    "gemini": {
        "audio": gemini.DEFAULT_MODEL,
        "image": gemini.DEFAULT_MODEL,
        "video": gemini.DEFAULT_MODEL,
    },
    "deepgram": {
        "audio": deepgram.DEFAULT_MODEL,
    },
}


def default_model_for(provider_id: str, capability: str) -> str | None:
    """Return the configured default model for ``provider_id``/``capability``."""

    return DEFAULT_PROVIDER_MODELS.get(provider_id.strip().lower(), {}).get(capability)


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
]
