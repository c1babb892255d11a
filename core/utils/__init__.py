"""Utility helpers shared across core packages."""

from .env import get_env, get_env_flag, get_runtime_env, is_production
from .errors import describe_failure, extract_error_message, format_unavailable_error

__all__ = [
    "describe_failure",
    "extract_error_message",
    "format_unavailable_error",
    "get_env",
    "get_env_flag",
    "get_runtime_env",
    "is_production",
]
