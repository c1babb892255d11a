"""Observability helpers for emitting structured metrics/events."""

from .metrics import (
    record_capability_attempt,
    record_capability_decision,
)
from .request_logging import register_http_request_logging

__all__ = [
    "record_capability_attempt",
    "record_capability_decision",
    "register_http_request_logging",
]
