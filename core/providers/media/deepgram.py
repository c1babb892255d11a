"""Deepgram pre-recorded audio transcription over the REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from config.media.providers import deepgram as deepgram_config
from core.clients.ai import get_deepgram_http_client
from core.exceptions import ProviderError, RateLimitError
from core.providers.base import Capability, MediaRequest, MediaResult, ProviderDescriptor
from core.utils.errors import describe_failure, extract_error_message

logger = logging.getLogger(__name__)


def _error_from_response(response: httpx.Response, provider: str) -> ProviderError:
    try:
        body: Any = response.json()
    except ValueError:
        body = {}
    # Deepgram reports failures as ``err_msg``; fall back to the generic shapes.
    message = None
    if isinstance(body, dict):
        message = body.get("err_msg") or extract_error_message([body])
    message = message or f"Deepgram request failed with status {response.status_code}"

    if response.status_code == 429:
        return RateLimitError(message, provider=provider)
    if response.status_code in (401, 403):
        return ProviderError(message, provider=provider, kind="auth")
    return ProviderError(message, provider=provider)


def _extract_transcript(payload: Any) -> str | None:
    try:
        return payload["results"]["channels"][0]["alternatives"][0]["transcript"]
    except (KeyError, IndexError, TypeError):
        return None


class DeepgramMediaProvider:
    """Send recorded audio to Deepgram's ``/listen`` endpoint."""

    def __init__(
        self,
        *,
        provider_id: str = "deepgram",
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.provider_id = provider_id
        self.api_key = api_key
        self.base_url = base_url

    async def transcribe_audio(self, request: MediaRequest) -> MediaResult:
        client = get_deepgram_http_client(api_key=self.api_key, base_url=self.base_url)
        model = request.model or deepgram_config.DEFAULT_MODEL
        params = {
            "model": model,
            "smart_format": str(deepgram_config.SMART_FORMAT).lower(),
            "punctuate": str(deepgram_config.PUNCTUATE).lower(),
        }
        if request.language:
            params["language"] = request.language
        else:
            params["detect_language"] = "true"

        try:
            response = await client.post(
                deepgram_config.LISTEN_PATH,
                params=params,
                content=request.data,
                headers={"Content-Type": request.mime_type or "audio/wav"},
            )
        except httpx.TimeoutException as exc:
            raise ProviderError(
                describe_failure(exc), provider=self.provider_id, original_error=exc, kind="timeout"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                describe_failure(exc), provider=self.provider_id, original_error=exc, kind="network"
            ) from exc

        if response.status_code >= 400:
            error = _error_from_response(response, self.provider_id)
            logger.warning("Deepgram transcription failed (model=%s): %s", model, error.message)
            raise error

        payload = response.json()
        transcript = _extract_transcript(payload)
        if transcript is None:
            raise ProviderError(
                "Deepgram response did not contain a transcript",
                provider=self.provider_id,
                kind="invalid_response",
            )

        detected = None
        try:
            detected = payload["results"]["channels"][0].get("detected_language")
        except (KeyError, IndexError, TypeError, AttributeError):
            detected = None

        return MediaResult(
            text=transcript.strip(),
            model=model,
            provider=self.provider_id,
            language=request.language or detected,
            metadata={"request_id": (payload.get("metadata") or {}).get("request_id")},
        )

    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            id=self.provider_id,
            capabilities=frozenset({Capability.AUDIO}),
            transcribe_audio=self.transcribe_audio,
            default_models={Capability.AUDIO: deepgram_config.DEFAULT_MODEL},
        )


__all__ = ["DeepgramMediaProvider"]
