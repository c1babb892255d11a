"""OpenAI media provider: audio transcription and image description."""

from __future__ import annotations

import base64
import logging
from io import BytesIO
from typing import Any

import openai

from config.media.providers import openai as openai_config
from core.clients.ai import get_openai_async_client
from core.exceptions import ProviderError, RateLimitError
from core.providers.base import Capability, MediaRequest, MediaResult, ProviderDescriptor
from core.utils.errors import describe_failure

logger = logging.getLogger(__name__)


def _map_openai_error(exc: Exception, provider: str) -> ProviderError:
    """Translate OpenAI SDK failures into the gateway's provider error kinds."""

    message = describe_failure(exc)
    if isinstance(exc, openai.RateLimitError):
        error: ProviderError = RateLimitError(message, provider=provider)
    elif isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        error = ProviderError(message, provider=provider, kind="auth")
    elif isinstance(exc, openai.APITimeoutError):
        error = ProviderError(message, provider=provider, kind="timeout")
    elif isinstance(exc, openai.APIConnectionError):
        error = ProviderError(message, provider=provider, kind="network")
    else:
        error = ProviderError(message, provider=provider)
    error.original_error = exc
    return error


class OpenAIMediaProvider:
    """Bridge the OpenAI audio transcription and vision APIs."""

    def __init__(
        self,
        *,
        provider_id: str = "openai",
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.provider_id = provider_id
        self.api_key = api_key
        self.base_url = base_url

    def _client(self):
        return get_openai_async_client(api_key=self.api_key, base_url=self.base_url)

    async def transcribe_audio(self, request: MediaRequest) -> MediaResult:
        model = request.model or openai_config.DEFAULT_TRANSCRIBE_MODEL
        buffer = BytesIO(request.data)
        buffer.name = request.filename or "recording.wav"  # type: ignore[attr-defined] - used by OpenAI SDK

        payload: dict[str, Any] = {"model": model, "file": buffer}
        if request.prompt:
            payload["prompt"] = request.prompt
        if request.language:
            payload["language"] = request.language

        try:
            response = await self._client().audio.transcriptions.create(**payload)
        except Exception as exc:
            logger.warning("OpenAI transcription failed (model=%s): %s", model, exc)
            raise _map_openai_error(exc, self.provider_id) from exc

        text = getattr(response, "text", None)
        if text is None:
            text = str(response)
        return MediaResult(
            text=text.strip(),
            model=model,
            provider=self.provider_id,
            language=request.language,
        )

    async def describe_image(self, request: MediaRequest) -> MediaResult:
        model = request.model or openai_config.DEFAULT_VISION_MODEL
        mime_type = request.mime_type or "image/png"
        encoded = base64.b64encode(request.data).decode("ascii")
        content = [
            {"type": "text", "text": request.prompt or "Describe the image."},
            {
                "type": "image_url",
                "image_url": {
                    "url": f"data:{mime_type};base64,{encoded}",
                    "detail": openai_config.VISION_IMAGE_DETAIL,
                },
            },
        ]

        try:
            response = await self._client().chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": content}],
                max_tokens=openai_config.VISION_MAX_TOKENS,
            )
        except Exception as exc:
            logger.warning("OpenAI image description failed (model=%s): %s", model, exc)
            raise _map_openai_error(exc, self.provider_id) from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise ProviderError(
                "OpenAI returned no choices for image description",
                provider=self.provider_id,
                kind="invalid_response",
            )
        text = choices[0].message.content or ""
        return MediaResult(
            text=text.strip(),
            model=getattr(response, "model", None) or model,
            provider=self.provider_id,
        )

    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            id=self.provider_id,
            capabilities=frozenset({Capability.AUDIO, Capability.IMAGE}),
            transcribe_audio=self.transcribe_audio,
            describe_image=self.describe_image,
            default_models={
                Capability.AUDIO: openai_config.DEFAULT_TRANSCRIBE_MODEL,
                Capability.IMAGE: openai_config.DEFAULT_VISION_MODEL,
            },
        )


__all__ = ["OpenAIMediaProvider"]
