"""Custom Exception Hierarchy for the Assistant Gateway
This module defines a typed exception hierarchy that enables precise error
handling and structured error responses across the gateway.

Exception Handling Flow:
    1. Registry construction raises ``ConfigurationError`` at startup
    2. Provider integrations raise ``ProviderError`` for a single failed call
    3. The capability runner absorbs provider failures into its decision record
    4. FastAPI exception handlers (see main.py) convert the rest to envelopes
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for all service layer errors."""


class ProviderError(ServiceError):
    """Raised when an external provider (AI API) fails.

    ``kind`` classifies the failure: ``unsupported``, ``auth``, ``quota``,
    ``network``, ``timeout``, ``invalid_response`` or ``unknown``.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        original_error: Exception | None = None,
        kind: str = "unknown",
    ):
        self.message = message
        self.provider = provider
        self.original_error = original_error
        self.kind = kind
        super().__init__(self.message)


class ConfigurationError(ServiceError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, key: str | None = None):
        self.message = message
        self.key = key
        super().__init__(self.message)


class RateLimitError(ProviderError):
    """Raised when a provider rate limit is exceeded."""

    def __init__(self, message: str, provider: str | None = None, retry_after: int | None = None):
        super().__init__(message, provider=provider, kind="quota")
        self.retry_after = retry_after
