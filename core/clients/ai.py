"""Initialise AI provider clients used across the gateway."""

from __future__ import annotations

import logging
from typing import Dict

import httpx
from google import genai
from openai import AsyncOpenAI

from config.media.providers import deepgram as deepgram_config
from core.exceptions import ConfigurationError
from core.utils.env import get_env

logger = logging.getLogger(__name__)


def _get_env(key: str, required: bool = False) -> str | None:
    """Read an environment variable, optionally ensuring it exists."""

    value = get_env(key)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {key} not set", key=key)
    return value


ai_clients: Dict[str, object] = {}


def _cache_key(name: str, api_key: str | None, base_url: str | None = None) -> str:
    if api_key is None and base_url is None:
        return name
    return f"{name}:{hash((api_key, base_url))}"


def get_openai_async_client(
    api_key: str | None = None, base_url: str | None = None
) -> AsyncOpenAI:
    """Return a cached asynchronous OpenAI client."""

    key = _cache_key("openai_async", api_key, base_url)
    client = ai_clients.get(key)
    if client is not None:
        return client  # type: ignore[return-value]

    resolved_key = api_key or _get_env("OPENAI_API_KEY", required=True)
    kwargs: Dict[str, object] = {"api_key": resolved_key}
    if base_url:
        kwargs["base_url"] = base_url
    client = AsyncOpenAI(**kwargs)
    ai_clients[key] = client
    logger.info("Initialised OpenAI async client via helper")
    return client


def get_gemini_client(api_key: str | None = None):
    """Return an initialised Google Generative AI client."""

    key = _cache_key("gemini", api_key)
    client = ai_clients.get(key)
    if client is not None:
        return client

    resolved_key = api_key or _get_env("GOOGLE_API_KEY", required=True)
    client = genai.Client(api_key=resolved_key)
    ai_clients[key] = client
    logger.info("Initialised Gemini client via helper")
    return client


def get_deepgram_http_client(
    api_key: str | None = None, base_url: str | None = None
) -> httpx.AsyncClient:
    """Return a cached ``httpx.AsyncClient`` pointed at the Deepgram REST API."""

    key = _cache_key("deepgram_http", api_key, base_url)
    client = ai_clients.get(key)
    if client is not None:
        return client  # type: ignore[return-value]

    resolved_key = api_key or _get_env("DEEPGRAM_API_KEY", required=True)
    client = httpx.AsyncClient(
        base_url=base_url or deepgram_config.BASE_URL,
        headers={"Authorization": f"Token {resolved_key}"},
        timeout=deepgram_config.REQUEST_TIMEOUT_SECONDS,
    )
    ai_clients[key] = client
    logger.info("Initialised Deepgram HTTP client via helper")
    return client


async def close_ai_clients() -> None:
    """Release transports held by cached async clients."""

    for name, client in list(ai_clients.items()):
        close = getattr(client, "aclose", None) or getattr(client, "close", None)
        if close is None:
            continue
        try:
            result = close()
            if hasattr(result, "__await__"):
                await result
        except Exception:  # pragma: no cover - best-effort cleanup
            logger.debug("Failed to close AI client %s", name, exc_info=True)
    ai_clients.clear()


__all__ = [
    "ai_clients",
    "close_ai_clients",
    "get_deepgram_http_client",
    "get_gemini_client",
    "get_openai_async_client",
]
