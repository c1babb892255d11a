"""Dependency helpers for the media understanding feature."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List

from fastapi import Form
from pydantic import ValidationError as PydanticValidationError

from features.media_understanding.schemas import CapabilityRunRequest
from features.media_understanding.service import MediaUnderstandingService, build_default_service


@dataclass(slots=True)
class ParsedCapabilityRun:
    """Wrapper returning either a parsed request or validation errors."""

    request: CapabilityRunRequest | None
    errors: List[Dict[str, Any]] | None


async def parse_capability_run_form(
    models: str = Form("[]", description="JSON list of {provider, model} entries"),
    channel: str | None = Form(None),
    sender_id: str | None = Form(None),
    session_id: str | None = Form(None),
    timeout_seconds: float | None = Form(None),
    concurrent: bool = Form(False),
) -> ParsedCapabilityRun:
    """Parse multipart form data into a structured request model."""

    try:
        raw_models = models.strip()
        parsed_models = json.loads(raw_models) if raw_models else []
    except json.JSONDecodeError:
        return ParsedCapabilityRun(
            request=None,
            errors=[{"loc": ["models"], "msg": "Invalid JSON", "type": "value_error.jsondecode"}],
        )

    raw_payload = {
        "models": parsed_models,
        "channel": channel,
        "sender_id": sender_id,
        "session_id": session_id,
        "timeout_seconds": timeout_seconds,
        "concurrent": concurrent,
    }
    try:
        request = CapabilityRunRequest.model_validate(raw_payload)
    except PydanticValidationError as exc:
        return ParsedCapabilityRun(
            request=None, errors=json.loads(exc.json(include_url=False))
        )
    return ParsedCapabilityRun(request=request, errors=None)


@lru_cache(maxsize=1)
def _media_service_singleton() -> MediaUnderstandingService:
    return build_default_service()


def get_media_understanding_service() -> MediaUnderstandingService:
    """Return a cached instance of :class:`MediaUnderstandingService`."""

    return _media_service_singleton()


def reset_media_understanding_service() -> None:
    """Drop the cached service so the next request reloads settings."""

    _media_service_singleton.cache_clear()


__all__ = [
    "ParsedCapabilityRun",
    "get_media_understanding_service",
    "parse_capability_run_form",
    "reset_media_understanding_service",
]
