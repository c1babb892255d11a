import json
from types import SimpleNamespace

import httpx
import pytest

from core.exceptions import ProviderError, RateLimitError
from core.providers.base import MediaRequest
from core.providers.media.deepgram import DeepgramMediaProvider
from core.providers.media.gemini import GeminiMediaProvider
from core.providers.media.openai import OpenAIMediaProvider


pytestmark = pytest.mark.anyio


class _DummyCall:
    def __init__(self, response=None, error: Exception | None = None):
        self.calls: list[dict] = []
        self._response = response
        self._error = error

    async def create(self, **payload):
        self.calls.append(payload)
        if self._error is not None:
            raise self._error
        return self._response


async def test_openai_transcribe_forwards_payload(monkeypatch):
    transcriptions = _DummyCall(response=SimpleNamespace(text=" hello world "))
    dummy_client = SimpleNamespace(audio=SimpleNamespace(transcriptions=transcriptions))
    monkeypatch.setattr(
        "core.providers.media.openai.get_openai_async_client", lambda **_: dummy_client
    )

    provider = OpenAIMediaProvider(api_key="sk-test")
    result = await provider.transcribe_audio(
        MediaRequest(data=b"pcm", filename="clip.ogg", language="en", prompt="hint")
    )

    assert result.text == "hello world"
    assert result.model == "gpt-4o-mini-transcribe"
    assert result.provider == "openai"
    call = transcriptions.calls[0]
    assert call["model"] == "gpt-4o-mini-transcribe"
    assert call["language"] == "en"
    assert call["prompt"] == "hint"
    assert call["file"].name == "clip.ogg"


async def test_openai_describe_image_sends_data_uri(monkeypatch):
    response = SimpleNamespace(
        model="gpt-4o-mini-2024",
        choices=[SimpleNamespace(message=SimpleNamespace(content="A red bicycle."))],
    )
    completions = _DummyCall(response=response)
    dummy_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(
        "core.providers.media.openai.get_openai_async_client", lambda **_: dummy_client
    )

    provider = OpenAIMediaProvider()
    result = await provider.describe_image(
        MediaRequest(data=b"\x89PNG", mime_type="image/png", model="gpt-4o", prompt="What?")
    )

    assert result.text == "A red bicycle."
    assert result.model == "gpt-4o-mini-2024"
    content = completions.calls[0]["messages"][0]["content"]
    assert content[0] == {"type": "text", "text": "What?"}
    assert content[1]["image_url"]["url"].startswith("data:image/png;base64,")
    assert completions.calls[0]["model"] == "gpt-4o"


async def test_openai_failure_is_wrapped_in_provider_error(monkeypatch):
    transcriptions = _DummyCall(error=RuntimeError("upstream exploded"))
    dummy_client = SimpleNamespace(audio=SimpleNamespace(transcriptions=transcriptions))
    monkeypatch.setattr(
        "core.providers.media.openai.get_openai_async_client", lambda **_: dummy_client
    )

    with pytest.raises(ProviderError) as excinfo:
        await OpenAIMediaProvider().transcribe_audio(MediaRequest(data=b"pcm"))

    assert excinfo.value.provider == "openai"
    assert excinfo.value.kind == "unknown"
    assert str(excinfo.value) == "upstream exploded"


async def test_gemini_describe_video_uses_inline_part(monkeypatch):
    calls: list[dict] = []

    class _Models:
        async def generate_content(self, **kwargs):
            calls.append(kwargs)
            return SimpleNamespace(text="Someone waves.")

    monkeypatch.setattr(
        "core.providers.media.gemini.get_gemini_client",
        lambda **_: SimpleNamespace(aio=SimpleNamespace(models=_Models())),
    )

    provider = GeminiMediaProvider(api_key="g-test")
    result = await provider.describe_video(
        MediaRequest(data=b"mp4", mime_type="video/mp4", prompt="Describe")
    )

    assert result.text == "Someone waves."
    assert result.provider == "gemini"
    assert result.model == "gemini-2.5-flash"
    assert calls[0]["model"] == "gemini-2.5-flash"
    assert calls[0]["contents"][0] == "Describe"


async def test_gemini_failure_is_wrapped_in_provider_error(monkeypatch):
    class _Models:
        async def generate_content(self, **kwargs):
            raise RuntimeError("quota gone")

    monkeypatch.setattr(
        "core.providers.media.gemini.get_gemini_client",
        lambda **_: SimpleNamespace(aio=SimpleNamespace(models=_Models())),
    )

    with pytest.raises(ProviderError) as excinfo:
        await GeminiMediaProvider().describe_image(MediaRequest(data=b"png"))

    assert excinfo.value.provider == "gemini"
    assert "quota gone" in str(excinfo.value)


def _deepgram_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url="https://deepgram.test/v1", transport=httpx.MockTransport(handler)
    )


async def test_deepgram_transcribe_parses_transcript(monkeypatch):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = {
            "metadata": {"request_id": "req-1"},
            "results": {
                "channels": [
                    {
                        "detected_language": "pl",
                        "alternatives": [{"transcript": "dzien dobry"}],
                    }
                ]
            },
        }
        return httpx.Response(200, json=body)

    client = _deepgram_client(handler)
    monkeypatch.setattr(
        "core.providers.media.deepgram.get_deepgram_http_client", lambda **_: client
    )

    result = await DeepgramMediaProvider(api_key="dg").transcribe_audio(
        MediaRequest(data=b"wav", mime_type="audio/wav")
    )
    await client.aclose()

    assert result.text == "dzien dobry"
    assert result.model == "nova-3"
    assert result.language == "pl"
    assert result.metadata == {"request_id": "req-1"}
    assert seen[0].url.path == "/v1/listen"
    assert seen[0].url.params["detect_language"] == "true"
    assert seen[0].headers["content-type"] == "audio/wav"


async def test_deepgram_rate_limit_maps_to_rate_limit_error(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, content=json.dumps({"err_msg": "Too many requests"}))

    client = _deepgram_client(handler)
    monkeypatch.setattr(
        "core.providers.media.deepgram.get_deepgram_http_client", lambda **_: client
    )

    with pytest.raises(RateLimitError) as excinfo:
        await DeepgramMediaProvider().transcribe_audio(MediaRequest(data=b"wav"))
    await client.aclose()

    assert excinfo.value.kind == "quota"
    assert str(excinfo.value) == "Too many requests"


async def test_deepgram_missing_transcript_is_invalid_response(monkeypatch):
    client = _deepgram_client(lambda request: httpx.Response(200, json={"results": {}}))
    monkeypatch.setattr(
        "core.providers.media.deepgram.get_deepgram_http_client", lambda **_: client
    )

    with pytest.raises(ProviderError) as excinfo:
        await DeepgramMediaProvider().transcribe_audio(MediaRequest(data=b"wav"))
    await client.aclose()

    assert excinfo.value.kind == "invalid_response"
