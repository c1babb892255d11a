"""Test configuration helpers."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List

import pytest

# Explicitly opt-in to the async plugins we rely on. Some execution environments
# disable plugin auto-discovery via ``PYTEST_DISABLE_PLUGIN_AUTOLOAD`` which
# prevents AnyIO's plugin from being loaded even if the package is installed.
pytest_plugins = ("anyio",)

# Ensure the repository root is importable so ``import core`` succeeds when
# tests are executed from arbitrary working directories.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("NODE_ENV", "test")

from core.providers.base import MediaRequest, MediaResult, ProviderDescriptor  # noqa: E402
from core.providers.registry import ProviderRegistry, build_provider_registry  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    """Default AnyIO backend used when tests do not override the fixture."""

    return "asyncio"


@pytest.fixture(autouse=True)
def clear_provider_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials from leaking into auto provider selection."""

    for name in ("OPENAI_API_KEY", "GOOGLE_API_KEY", "DEEPGRAM_API_KEY", "GATEWAY_CONFIG_PATH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session", autouse=True)
def suppress_asyncio_debug_logging() -> None:
    """Prevent asyncio debug logs from writing to closed pytest capture streams."""

    logger = logging.getLogger("asyncio")
    if logger.getEffectiveLevel() < logging.INFO:
        logger.setLevel(logging.INFO)


@pytest.fixture(scope="session", autouse=True)
def close_cached_ai_clients() -> None:
    """Ensure cached SDK clients release their httpx transports during teardown."""

    yield

    from core.clients.ai import ai_clients, close_ai_clients

    if ai_clients:
        asyncio.run(close_ai_clients())


class FakeProvider:
    """In-memory provider recording every request it receives.

    ``behaviour`` is either a string returned as the text, an exception
    instance raised on every call, or an async callable receiving the request.
    """

    def __init__(
        self,
        provider_id: str,
        behaviour: Any = "ok",
        *,
        capabilities: Iterable[str] = ("audio",),
        default_models: Dict[str, str] | None = None,
        echo_model: str | None = None,
    ) -> None:
        self.provider_id = provider_id
        self.behaviour = behaviour
        self.capabilities = tuple(capabilities)
        self.default_models = dict(default_models or {})
        self.echo_model = echo_model
        self.requests: List[MediaRequest] = []

    async def __call__(self, request: MediaRequest) -> MediaResult:
        self.requests.append(request)
        behaviour = self.behaviour
        if isinstance(behaviour, BaseException):
            raise behaviour
        if callable(behaviour):
            return await behaviour(request)
        return MediaResult(
            text=str(behaviour),
            model=self.echo_model or request.model,
            provider=self.provider_id,
        )

    def descriptor(self) -> ProviderDescriptor:
        functions: Dict[str, Callable[[MediaRequest], Awaitable[MediaResult]]] = {}
        for capability in self.capabilities:
            name = {
                "audio": "transcribe_audio",
                "image": "describe_image",
                "video": "describe_video",
            }[capability]
            functions[name] = self
        return ProviderDescriptor(
            id=self.provider_id,
            capabilities=frozenset(self.capabilities),
            default_models=self.default_models,
            **functions,
        )


@pytest.fixture
def fake_provider() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture
def make_registry() -> Callable[..., ProviderRegistry]:
    def _factory(*providers: FakeProvider) -> ProviderRegistry:
        return build_provider_registry(provider.descriptor() for provider in providers)

    return _factory
