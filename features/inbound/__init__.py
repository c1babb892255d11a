"""Inbound chat message handling."""

from .context import InboundMessage, apply_media_understanding, build_inbound_body

__all__ = ["InboundMessage", "apply_media_understanding", "build_inbound_body"]
