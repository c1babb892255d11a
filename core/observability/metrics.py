"""Structured logging helpers for media understanding observability."""

from __future__ import annotations

import logging
from typing import Any, Mapping

_logger = logging.getLogger("observability.media")


def _build_payload(**fields: Any) -> Mapping[str, Any]:
    """Return a payload suitable for structured logging handlers."""

    return {
        "event": fields.pop("event"),
        "media": fields,
    }


def record_capability_attempt(
    *,
    capability: str,
    provider: str,
    model: str | None,
    attachment_index: int,
    status: str,
    elapsed_seconds: float,
    error: str | None = None,
    error_kind: str | None = None,
) -> None:
    """Emit a structured log entry for one provider invocation."""

    payload = _build_payload(
        event=f"capability_attempt.{status}",
        capability=capability,
        provider=provider,
        model=model,
        attachment_index=attachment_index,
        elapsed_ms=int(elapsed_seconds * 1000),
        error=error,
        error_kind=error_kind,
    )
    level = logging.INFO if status == "success" else logging.WARNING
    _logger.log(level, "capability_attempt_%s", status, extra={"observability": payload})


def record_capability_decision(
    *,
    capability: str,
    outcome: str,
    reason: str,
    provider: str | None,
    model: str | None,
    attachment_count: int,
    output_count: int,
    elapsed_seconds: float,
    context: Mapping[str, Any] | None = None,
) -> None:
    """Emit a structured log entry summarising a capability run."""

    payload = _build_payload(
        event="capability_run.completed",
        capability=capability,
        outcome=outcome,
        reason=reason,
        provider=provider,
        model=model,
        attachment_count=attachment_count,
        output_count=output_count,
        elapsed_ms=int(elapsed_seconds * 1000),
        context=dict(context or {}),
    )
    level = logging.ERROR if outcome == "error" else logging.INFO
    _logger.log(level, "capability_run_%s", outcome, extra={"observability": payload})
