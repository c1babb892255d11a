"""Google Gemini media provider covering audio, image and video understanding."""

from __future__ import annotations

import logging

from google.genai import types as genai_types

from config.media.defaults import DEFAULT_PROMPTS
from config.media.providers import gemini as gemini_config
from core.clients.ai import get_gemini_client
from core.exceptions import ProviderError
from core.providers.base import Capability, MediaRequest, MediaResult, ProviderDescriptor
from core.utils.errors import describe_failure

logger = logging.getLogger(__name__)

_DEFAULT_MIME_TYPES = {
    Capability.AUDIO: "audio/wav",
    Capability.IMAGE: "image/png",
    Capability.VIDEO: "video/mp4",
}


class GeminiMediaProvider:
    """Bridge the Gemini ``generate_content`` API for inline media parts."""

    def __init__(self, *, provider_id: str = "gemini", api_key: str | None = None) -> None:
        self.provider_id = provider_id
        self.api_key = api_key

    async def _generate(self, request: MediaRequest, capability: Capability) -> MediaResult:
        client = get_gemini_client(api_key=self.api_key)
        model_name = gemini_config.normalise_gemini_model(request.model)
        prompt = request.prompt or DEFAULT_PROMPTS[capability.value]
        if capability is Capability.AUDIO and request.language:
            prompt = f"{prompt}\nThe spoken language is {request.language}."

        mime_type = request.mime_type or _DEFAULT_MIME_TYPES[capability]
        part = genai_types.Part.from_bytes(data=request.data, mime_type=mime_type)

        try:
            response = await client.aio.models.generate_content(
                model=model_name,
                contents=[prompt, part],
            )
        except Exception as exc:
            logger.warning("Gemini %s request failed (model=%s): %s", capability.value, model_name, exc)
            raise ProviderError(
                describe_failure(exc), provider=self.provider_id, original_error=exc
            ) from exc

        text = getattr(response, "text", None)
        if text is None:
            raise ProviderError(
                "Gemini returned an empty response",
                provider=self.provider_id,
                kind="invalid_response",
            )
        return MediaResult(
            text=text.strip(),
            model=model_name,
            provider=self.provider_id,
            language=request.language,
        )

    async def transcribe_audio(self, request: MediaRequest) -> MediaResult:
        return await self._generate(request, Capability.AUDIO)

    async def describe_image(self, request: MediaRequest) -> MediaResult:
        return await self._generate(request, Capability.IMAGE)

    async def describe_video(self, request: MediaRequest) -> MediaResult:
        return await self._generate(request, Capability.VIDEO)

    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            id=self.provider_id,
            capabilities=frozenset({Capability.AUDIO, Capability.IMAGE, Capability.VIDEO}),
            transcribe_audio=self.transcribe_audio,
            describe_image=self.describe_image,
            describe_video=self.describe_video,
            default_models={
                Capability.AUDIO: gemini_config.DEFAULT_MODEL,
                Capability.IMAGE: gemini_config.DEFAULT_MODEL,
                Capability.VIDEO: gemini_config.DEFAULT_MODEL,
            },
        )


__all__ = ["GeminiMediaProvider"]
