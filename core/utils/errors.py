"""Helpers that turn raw provider failures into short human readable messages."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

UNAVAILABLE_ERROR_PREFIX = "error file unavailable"

_MESSAGE_PATHS: tuple[tuple[str, ...], ...] = (
    ("message",),
    ("error", "message"),
    ("response", "body", "error", "message"),
)


def _lookup(value: Any, path: tuple[str, ...]) -> Any:
    current = value
    for key in path:
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(key)
        elif isinstance(current, (str, bytes, int, float, bool)):
            return None
        else:
            current = getattr(current, key, None)
    return current


def _message_of(failure: Any) -> str | None:
    for path in _MESSAGE_PATHS:
        candidate = _lookup(failure, path)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    if isinstance(failure, BaseException):
        text = str(failure).strip()
        if text:
            return text
    return None


def extract_error_message(failures: Iterable[Any]) -> str | None:
    """Return the first readable error message across ``failures``.

    Each failure is checked in list order: the flat ``message`` field first,
    then ``error.message`` and finally ``response.body.error.message``.
    Mappings and attribute-bearing objects (exceptions, SDK errors) are both
    understood.
    """

    for failure in failures:
        message = _message_of(failure)
        if message:
            return message
    return None


def format_unavailable_error(value: Any) -> str:
    """Format a failure that carries no readable error shape."""

    if isinstance(value, BaseException):
        detail = str(value) or value.__class__.__name__
    else:
        detail = str(value)
    return f"{UNAVAILABLE_ERROR_PREFIX}: {detail}"


def describe_failure(value: Any) -> str:
    """Return a single-line description for one raw failure."""

    if isinstance(value, (str, bytes)) or value is None:
        return format_unavailable_error(value)
    message = extract_error_message([value])
    if message:
        return message
    return format_unavailable_error(value)


__all__ = [
    "UNAVAILABLE_ERROR_PREFIX",
    "describe_failure",
    "extract_error_message",
    "format_unavailable_error",
]
