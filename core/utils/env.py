"""Environment variable helpers used across the gateway."""

from __future__ import annotations

import os

from core.exceptions import ConfigurationError

__all__ = ["get_env", "get_env_flag", "get_runtime_env", "is_production"]

_TRUTHY = {"1", "true", "yes", "on"}


def get_env(key: str, default: str | None = None, *, required: bool = False) -> str | None:
    """Return ``key`` from the environment; ``required`` turns a miss into ConfigurationError."""

    value = os.getenv(key, default)
    if required and value is None:
        raise ConfigurationError(f"Required environment variable {key} not set", key=key)
    return value


def get_env_flag(key: str, default: bool = False) -> bool:
    value = get_env(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def get_runtime_env() -> str:
    """Deployment label from ``GATEWAY_ENV`` (``NODE_ENV`` is still honoured)."""

    value = get_env("GATEWAY_ENV") or get_env("NODE_ENV") or "local"
    return value.strip().lower()


def is_production() -> bool:
    return get_runtime_env() == "production"
