"""Response envelope shared by every gateway HTTP route."""

from __future__ import annotations

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """``{code, success, message, data, meta}`` wrapper around route payloads.

    Capability runs always answer 200 with the decision record in ``data``;
    non-2xx codes are reserved for malformed requests and configuration faults.
    """

    code: int = Field(..., description="HTTP status mirrored into the body")
    success: bool = Field(..., description="False for any code >= 400")
    message: str = Field(..., description="Short human readable summary")
    data: Optional[T] = Field(None, description="Route specific payload")
    meta: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Diagnostics such as the decision outcome and reason",
    )


def api_response(
    *,
    code: int = 200,
    message: str,
    data: Any | None = None,
    meta: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """Build the envelope and return it as a JSON ready dict."""

    return ApiResponse[Any](
        code=code,
        success=code < 400,
        message=message,
        data=data,
        meta=meta,
    ).model_dump()


def ok(message: str, data: Any | None = None, meta: Dict[str, Any] | None = None) -> Dict[str, Any]:
    return api_response(code=200, message=message, data=data, meta=meta)


def error(
    code: int,
    message: str,
    data: Any | None = None,
    meta: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """Envelope for a failed request; ``code`` must be an error status."""

    if code < 400:
        raise ValueError(f"error envelope needs a status >= 400, got {code}")
    return api_response(code=code, message=message, data=data, meta=meta)


__all__ = ["ApiResponse", "api_response", "error", "ok"]
