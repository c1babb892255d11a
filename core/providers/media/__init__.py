"""Media understanding provider integrations."""

from .deepgram import DeepgramMediaProvider
from .gemini import GeminiMediaProvider
from .openai import OpenAIMediaProvider

__all__ = [
    "DeepgramMediaProvider",
    "GeminiMediaProvider",
    "OpenAIMediaProvider",
]
