"""Build the agent-facing body of an inbound chat message.

Media understanding outputs are folded into the body so the agent sees a
transcript or description instead of raw attachments. Only
``decision.outcome`` and ``outputs`` of each run are read here.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Sequence

from core.providers.base import Capability
from features.media_understanding.attachments import MediaAttachment
from features.media_understanding.decision import DecisionOutcome, RunResult
from features.media_understanding.runner import CapabilityContext
from features.media_understanding.service import MediaUnderstandingService

logger = logging.getLogger(__name__)

BLOCK_LABELS: Dict[Capability, str] = {
    Capability.AUDIO: "Audio",
    Capability.IMAGE: "Image",
    Capability.VIDEO: "Video",
}


@dataclass(frozen=True)
class InboundMessage:
    channel: str
    sender_id: str
    text: str = ""
    sender_name: str | None = None
    is_group: bool = False
    session_id: str | None = None
    message_id: str | None = None
    attachments: Sequence[MediaAttachment] = ()
    media_results: Dict[str, RunResult] = field(default_factory=dict)

    def capability_context(self) -> CapabilityContext:
        return CapabilityContext(
            channel=self.channel,
            sender_id=self.sender_id,
            session_id=self.session_id,
            message_id=self.message_id,
        )


def _sender_label(message: InboundMessage) -> str:
    name = (message.sender_name or "").strip()
    if name and name != message.sender_id:
        return f"{name} ({message.sender_id})"
    return message.sender_id


def _media_blocks(message: InboundMessage) -> List[str]:
    blocks: List[str] = []
    for capability, label in BLOCK_LABELS.items():
        result = message.media_results.get(capability.value)
        if result is None or result.decision.outcome is not DecisionOutcome.SUCCESS:
            continue
        outputs = result.outputs
        for position, output in enumerate(outputs, start=1):
            text = (output.text or "").strip()
            if not text:
                continue
            heading = f"[{label}]" if len(outputs) == 1 else f"[{label} {position}/{len(outputs)}]"
            blocks.append(f"{heading}\n{text}")
    return blocks


def build_inbound_body(message: InboundMessage) -> str:
    """Return the message text with media blocks appended.

    Group messages are prefixed with ``"<name> (<id>): "`` so the agent can
    tell participants apart.
    """

    text = (message.text or "").strip()
    parts = [text] if text else []
    parts.extend(_media_blocks(message))
    body = "\n\n".join(parts)
    if message.is_group and body:
        body = f"{_sender_label(message)}: {body}"
    return body


async def apply_media_understanding(
    message: InboundMessage,
    service: MediaUnderstandingService,
    *,
    cancel_event: asyncio.Event | None = None,
    timeout: float | None = None,
) -> InboundMessage:
    """Run every capability over the message attachments and keep the results."""

    if not message.attachments:
        return message

    context = message.capability_context()
    results: Dict[str, RunResult] = dict(message.media_results)
    for capability in BLOCK_LABELS:
        result = await service.run(
            capability,
            message.attachments,
            context=context,
            cancel_event=cancel_event,
            timeout=timeout,
        )
        outcome = result.decision.outcome
        if outcome is DecisionOutcome.SUCCESS:
            results[capability.value] = result
        elif outcome is DecisionOutcome.ERROR:
            logger.warning(
                "Media understanding failed for %s message %s: %s",
                capability.value,
                message.message_id,
                result.decision.reason,
            )
    return replace(message, media_results=results)


__all__ = [
    "BLOCK_LABELS",
    "InboundMessage",
    "apply_media_understanding",
    "build_inbound_body",
]
