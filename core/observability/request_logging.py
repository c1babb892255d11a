"""Request logging helpers for HTTP traffic."""
from __future__ import annotations

import logging
import time
import urllib.parse

from fastapi import FastAPI, Request

_SENSITIVE_QUERY_KEYS = {"access_token", "api_key", "apikey", "key", "token"}
# Paths to skip HTTP request logging (high-frequency internal endpoints)
_QUIET_PATHS = ("/health",)


def _format_client_address(client: tuple[str, int] | None) -> str:
    if not client:
        return "unknown"
    host, port = client
    return f"{host}:{port}" if port is not None else host


def _format_query(query: str) -> str:
    if not query:
        return "<none>"

    params = urllib.parse.parse_qs(query, keep_blank_values=True)
    redacted: dict[str, list[str]] = {}
    for key, values in params.items():
        if key.lower() in _SENSITIVE_QUERY_KEYS:
            redacted[key] = ["***" for _ in values]
        else:
            redacted[key] = values
    return urllib.parse.urlencode(redacted, doseq=True)


def register_http_request_logging(app: FastAPI, *, logger_name: str = "core.http") -> None:
    """Attach middleware that logs every HTTP request with its status and latency."""

    if getattr(app.state, "_http_request_logging_installed", False):  # pragma: no cover - idempotence
        return

    logger = logging.getLogger(logger_name)

    @app.middleware("http")
    async def _log_request(request: Request, call_next):  # type: ignore[override]
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        client = request.client
        client_addr = _format_client_address((client.host, client.port) if client else None)
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "HTTP %s %s from %s -> %s (%.0f ms, query=%s)",
            request.method,
            path,
            client_addr,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            _format_query(request.url.query),
        )
        return response

    app.state._http_request_logging_installed = True
