import json
from typing import Iterator

import pytest
from httpx import ASGITransport, AsyncClient

from features.media_understanding.dependencies import get_media_understanding_service
from features.media_understanding.service import MediaUnderstandingService
from main import app


@pytest.fixture(autouse=True)
def reset_dependency_overrides() -> Iterator[None]:
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def stub_service(fake_provider, make_registry) -> MediaUnderstandingService:
    registry = make_registry(
        fake_provider("openai", "transcribed text", capabilities=("audio", "image")),
    )
    service = MediaUnderstandingService(
        registry=registry,
        settings={"providers": {"openai": {"api_key": "sk-test"}}},
        env_keys={},
    )
    app.dependency_overrides[get_media_understanding_service] = lambda: service
    return service


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.anyio
async def test_run_audio_returns_envelope(stub_service) -> None:
    files = {"files": ("voice.ogg", b"ogg-bytes", "audio/ogg")}

    async with _client() as client:
        response = await client.post(
            "/api/v1/media/audio/run", files=files, data={"channel": "telegram"}
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["code"] == 200
    assert payload["success"] is True
    assert payload["meta"]["outcome"] == "success"
    assert payload["data"]["outputs"][0]["text"] == "transcribed text"
    assert payload["data"]["decision"]["provider"] == "openai"
    assert payload["data"]["decision"]["model"] == "gpt-4o-mini-transcribe"


@pytest.mark.anyio
async def test_run_with_explicit_models(stub_service) -> None:
    files = {"files": ("photo.jpg", b"jpg", "image/jpeg")}
    data = {"models": json.dumps([{"provider": "openai", "model": "gpt-4o"}])}

    async with _client() as client:
        response = await client.post("/api/v1/media/image/run", files=files, data=data)

    payload = response.json()
    assert response.status_code == 200
    assert payload["data"]["decision"]["model"] == "gpt-4o"


@pytest.mark.anyio
async def test_unknown_capability_returns_400(stub_service) -> None:
    files = {"files": ("voice.ogg", b"ogg-bytes", "audio/ogg")}

    async with _client() as client:
        response = await client.post("/api/v1/media/smell/run", files=files)

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.anyio
async def test_invalid_models_json_returns_400(stub_service) -> None:
    files = {"files": ("voice.ogg", b"ogg-bytes", "audio/ogg")}

    async with _client() as client:
        response = await client.post(
            "/api/v1/media/audio/run", files=files, data={"models": "[not json"}
        )

    assert response.status_code == 400
    assert response.json()["data"]["errors"][0]["loc"] == ["models"]


@pytest.mark.anyio
async def test_unavailable_capability_is_reported_in_decision(stub_service) -> None:
    files = {"files": ("clip.mp4", b"mp4", "video/mp4")}

    async with _client() as client:
        response = await client.post("/api/v1/media/video/run", files=files)

    payload = response.json()
    assert response.status_code == 200
    assert payload["meta"]["outcome"] == "unavailable"
    assert payload["data"]["outputs"] == []


@pytest.mark.anyio
async def test_capabilities_overview(stub_service) -> None:
    async with _client() as client:
        response = await client.get("/api/v1/media/capabilities")

    payload = response.json()
    assert response.status_code == 200
    by_name = {item["capability"]: item for item in payload["data"]}
    assert by_name["audio"]["enabled"] is True
    assert by_name["video"]["reason"] == "no provider declares capability"


@pytest.mark.anyio
async def test_health_check() -> None:
    async with _client() as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
