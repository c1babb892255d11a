"""API key loading for external providers."""

from __future__ import annotations

import os
from typing import Dict


def load_api_keys() -> Dict[str, str]:
    """Load API keys from the environment with sensible defaults."""

    return {
        "openai": os.getenv("OPENAI_API_KEY", ""),
        "gemini": os.getenv("GOOGLE_API_KEY", ""),
        "deepgram": os.getenv("DEEPGRAM_API_KEY", ""),
    }


API_KEYS = load_api_keys()

OPENAI_API_KEY = API_KEYS["openai"]
GOOGLE_API_KEY = API_KEYS["gemini"]
DEEPGRAM_API_KEY = API_KEYS["deepgram"]

__all__ = [
    "API_KEYS",
    "DEEPGRAM_API_KEY",
    "GOOGLE_API_KEY",
    "OPENAI_API_KEY",
    "load_api_keys",
]
