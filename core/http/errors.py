"""Utilities for formatting structured HTTP error responses."""

from __future__ import annotations

from typing import Any, Dict

from core.exceptions import ConfigurationError


def _build_error_payload(
    *,
    error: str,
    message: str,
    context: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": error, "message": message}
    if context:
        payload["context"] = context
    return payload


def format_configuration_error(exc: ConfigurationError) -> Dict[str, Any]:
    """Return a standard payload for :class:`ConfigurationError`."""

    context = {"key": exc.key} if getattr(exc, "key", None) else None
    return _build_error_payload(
        error="configuration_error",
        message=str(exc),
        context=context,
    )


__all__ = ["format_configuration_error"]
