"""Deepgram pre-recorded transcription configuration."""

from __future__ import annotations

import os

# Endpoint
BASE_URL = os.getenv("DEEPGRAM_BASE_URL", "https://api.deepgram.com/v1")
LISTEN_PATH = "/listen"

# Model defaults
DEFAULT_MODEL = "nova-3"

# Transcription settings
SMART_FORMAT = True
PUNCTUATE = True
REQUEST_TIMEOUT_SECONDS = 60.0

__all__ = [
    "BASE_URL",
    "DEFAULT_MODEL",
    "LISTEN_PATH",
    "PUNCTUATE",
    "REQUEST_TIMEOUT_SECONDS",
    "SMART_FORMAT",
]
