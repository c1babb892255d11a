"""Provider specific media understanding configuration."""

from . import deepgram, gemini, openai

__all__ = ["deepgram", "gemini", "openai"]
