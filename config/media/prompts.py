"""Default prompts used when a capability configuration supplies none.

Edit these to customise how providers describe media attachments.
"""

from __future__ import annotations


DEFAULT_AUDIO_PROMPT = "Transcribe the audio."

DEFAULT_IMAGE_PROMPT = """Describe the image.
Mention any visible text verbatim and keep the description concise."""

DEFAULT_VIDEO_PROMPT = """Describe the video.
Summarise what happens in order and transcribe any spoken words that matter."""


__all__ = ["DEFAULT_AUDIO_PROMPT", "DEFAULT_IMAGE_PROMPT", "DEFAULT_VIDEO_PROMPT"]
