"""OpenAI media understanding configuration."""

from __future__ import annotations

# Model defaults
DEFAULT_TRANSCRIBE_MODEL = "gpt-4o-mini-transcribe"
DEFAULT_VISION_MODEL = "gpt-4o-mini"

# Vision request settings
VISION_MAX_TOKENS = 1024
VISION_IMAGE_DETAIL = "auto"

__all__ = [
    "DEFAULT_TRANSCRIBE_MODEL",
    "DEFAULT_VISION_MODEL",
    "VISION_IMAGE_DETAIL",
    "VISION_MAX_TOKENS",
]
