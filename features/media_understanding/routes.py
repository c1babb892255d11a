"""REST API routes for media understanding."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from core.exceptions import ConfigurationError
from core.http.errors import format_configuration_error
from core.providers.base import Capability
from core.pydantic_schemas import ApiResponse, error as api_error, ok as api_ok
from features.media_understanding.attachments import MediaAttachment
from features.media_understanding.config import ModelEntry
from features.media_understanding.decision import DecisionOutcome
from features.media_understanding.dependencies import (
    ParsedCapabilityRun,
    get_media_understanding_service,
    parse_capability_run_form,
)
from features.media_understanding.runner import CapabilityContext
from features.media_understanding.schemas import CapabilityRunResponse, CapabilityStatus
from features.media_understanding.service import MediaUnderstandingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/media", tags=["Media"])


@router.get(
    "/capabilities",
    summary="Show how each media capability resolves",
    response_model=ApiResponse[List[CapabilityStatus]],
)
async def list_capabilities(
    service: MediaUnderstandingService = Depends(get_media_understanding_service),
) -> JSONResponse:
    try:
        overview = service.describe_capabilities()
    except ConfigurationError as exc:
        logger.error("Media capability overview failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=api_error(500, str(exc), data=format_configuration_error(exc)),
        )
    payload = [CapabilityStatus.model_validate(item).model_dump() for item in overview]
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=api_ok("Media capabilities resolved", data=payload),
    )


async def _read_uploads(files: List[UploadFile]) -> List[MediaAttachment]:
    attachments: List[MediaAttachment] = []
    for upload in files:
        try:
            data = await upload.read()
        finally:
            await upload.close()
        attachments.append(
            MediaAttachment(
                data=data,
                filename=upload.filename,
                mime_type=upload.content_type,
            )
        )
    return attachments


@router.post(
    "/{capability}/run",
    summary="Run a media capability against uploaded attachments",
    response_model=ApiResponse[CapabilityRunResponse],
)
async def run_capability_endpoint(
    capability: str,
    files: List[UploadFile] = File(..., description="Media attachments in message order"),
    parsed: ParsedCapabilityRun = Depends(parse_capability_run_form),
    service: MediaUnderstandingService = Depends(get_media_understanding_service),
) -> JSONResponse:
    """Accept multipart uploads and return the outputs with the decision record."""

    try:
        resolved = Capability.parse(capability)
    except ValueError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=api_error(400, f"Unknown capability '{capability}'"),
        )

    if parsed.errors:
        logger.debug("Media run payload validation failed: %s", parsed.errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=api_error(
                400,
                "Invalid media capability payload",
                data={"errors": parsed.errors},
            ),
        )

    assert parsed.request is not None  # ``parsed.errors`` handled above
    request = parsed.request

    attachments = await _read_uploads(files)
    context = CapabilityContext(
        channel=request.channel,
        sender_id=request.sender_id,
        session_id=request.session_id,
    )
    models = [ModelEntry(provider=entry.provider, model=entry.model) for entry in request.models]

    logger.info(
        "POST /api/v1/media/%s/run received (attachments=%s, explicit_models=%s)",
        resolved.value,
        len(attachments),
        len(models),
    )

    try:
        result = await service.run(
            resolved,
            attachments,
            context=context,
            models=models or None,
            timeout=request.timeout_seconds,
            concurrent=request.concurrent,
        )
    except ConfigurationError as exc:
        logger.error("Media capability configuration error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=api_error(500, str(exc), data=format_configuration_error(exc)),
        )

    payload = CapabilityRunResponse.model_validate(result.to_dict())
    outcome = result.decision.outcome
    message = {
        DecisionOutcome.SUCCESS: "Media capability completed",
        DecisionOutcome.DISABLED: "Media capability disabled",
        DecisionOutcome.UNAVAILABLE: "Media capability unavailable",
        DecisionOutcome.ERROR: "Media capability failed",
    }[outcome]
    # Provider failures are reported in the decision record, not as HTTP errors.
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=api_ok(
            message,
            data=payload.model_dump(),
            meta={"outcome": outcome.value, "reason": result.decision.reason},
        ),
    )


__all__ = ["router"]
