"""Capability Runner - resolve, invoke providers and classify the outcome.

Workflow:
    1. Resolve the capability against the merged configuration
    2. Select the attachments the capability applies to
    3. For each attachment, try candidates in order until one succeeds
    4. Fold per-attachment results into a single ``DecisionRecord``

Provider failures never escape this module; they are recorded as attempts and
summarised in the decision ``reason``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from core.exceptions import ProviderError
from core.observability import record_capability_attempt, record_capability_decision
from core.providers.base import Capability, MediaRequest, MediaResult
from core.providers.registry import ProviderRegistry
from core.utils.errors import describe_failure, extract_error_message, format_unavailable_error
from features.media_understanding.attachments import (
    MediaAttachment,
    SelectedAttachment,
    count_matching,
    select_attachments,
)
from features.media_understanding.config import CapabilityConfig
from features.media_understanding.decision import (
    AttachmentDecision,
    AttemptRecord,
    AttemptStatus,
    CapabilityOutput,
    DecisionOutcome,
    DecisionRecord,
    RunResult,
)
from features.media_understanding.resolver import Candidate, resolve_capability

logger = logging.getLogger(__name__)

REASON_CANCELLED = "cancelled"
REASON_NO_ATTACHMENTS = "no attachments for capability"


@dataclass(frozen=True, slots=True)
class CapabilityContext:
    """Where a capability request came from; forwarded to providers as metadata."""

    channel: str | None = None
    sender_id: str | None = None
    session_id: str | None = None
    message_id: str | None = None

    def as_metadata(self) -> Dict[str, str]:
        return {
            key: value
            for key, value in (
                ("channel", self.channel),
                ("sender_id", self.sender_id),
                ("session_id", self.session_id),
                ("message_id", self.message_id),
            )
            if value
        }


class _Stopped(Exception):
    """Internal signal: the run was cancelled or its deadline passed."""


class _CallTimedOut(Exception):
    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"provider call timed out after {seconds:g}s")


@dataclass
class _RunSignals:
    cancel_event: asyncio.Event | None
    deadline: float | None
    stopped: bool = False

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def should_stop(self) -> bool:
        if self.cancel_event is not None and self.cancel_event.is_set():
            self.stopped = True
        elif self.deadline is not None and time.monotonic() >= self.deadline:
            self.stopped = True
        return self.stopped


@dataclass
class _AttachmentRun:
    selected: SelectedAttachment
    output: CapabilityOutput | None = None
    attempts: List[AttemptRecord] = field(default_factory=list)
    failures: List[Any] = field(default_factory=list)
    cancelled: bool = False

    def decision(self) -> AttachmentDecision:
        if self.output is not None:
            return AttachmentDecision(
                attachment_index=self.selected.index,
                succeeded=True,
                provider=self.output.provider,
                model=self.output.model,
            )
        if self.cancelled and not self.failures:
            reason = REASON_CANCELLED
        else:
            reason = _summarise_failures(self.failures)
        return AttachmentDecision(
            attachment_index=self.selected.index,
            succeeded=False,
            reason=reason,
            cancelled=self.cancelled,
        )


def _too_large(size: int, limit: int) -> str:
    return f"attachment exceeds max bytes ({size} > {limit})"


def _build_output(
    capability: Capability,
    selected: SelectedAttachment,
    candidate: Candidate,
    model: str | None,
    result: Any,
) -> CapabilityOutput:
    """Normalise a provider result; malformed results count as a failed attempt."""

    if isinstance(result, MediaResult):
        values = {
            "text": result.text,
            "model": result.model,
            "provider": result.provider,
            "language": result.language,
            "metadata": result.metadata,
        }
    elif isinstance(result, Mapping) and "text" in result:
        values = dict(result)
    else:
        raise ProviderError(
            f"provider returned an unsupported result ({type(result).__name__})",
            provider=candidate.provider,
            kind="invalid_response",
        )

    text = values.get("text")
    if not isinstance(text, str):
        raise ProviderError(
            "provider returned no text", provider=candidate.provider, kind="invalid_response"
        )
    metadata = values.get("metadata")
    if metadata is not None and not isinstance(metadata, Mapping):
        raise ProviderError(
            "provider returned malformed metadata",
            provider=candidate.provider,
            kind="invalid_response",
        )

    return CapabilityOutput(
        capability=capability.value,
        attachment_index=selected.index,
        text=text,
        provider=values.get("provider") or candidate.provider,
        model=values.get("model") or model,
        language=values.get("language"),
        filename=selected.attachment.resolved_filename,
        metadata=metadata or {},
    )


def _summarise_failures(failures: Iterable[Any]) -> str:
    collected = list(failures)
    if not collected:
        return ""
    message = extract_error_message(collected)
    if message:
        return message
    return format_unavailable_error(collected[0])


async def _invoke_once(
    registry: ProviderRegistry,
    capability: Capability,
    candidate: Candidate,
    request: MediaRequest,
    *,
    call_timeout: float | None,
    deadline_bound: bool,
    signals: _RunSignals,
):
    """Invoke one candidate, racing it against cancellation and timeouts.

    The invocation task is always finished or cancelled before returning, so
    nothing keeps running after the runner has moved on.
    """

    task = asyncio.ensure_future(registry.invoke(candidate.provider, capability, request))
    cancel_waiter: asyncio.Future | None = None
    waiters: set[asyncio.Future] = {task}
    if signals.cancel_event is not None:
        cancel_waiter = asyncio.ensure_future(signals.cancel_event.wait())
        waiters.add(cancel_waiter)
    try:
        done, _ = await asyncio.wait(
            waiters, timeout=call_timeout, return_when=asyncio.FIRST_COMPLETED
        )
        if task in done:
            return task.result()
        if signals.should_stop() or deadline_bound:
            signals.stopped = True
            raise _Stopped()
        raise _CallTimedOut(call_timeout or 0.0)
    finally:
        if cancel_waiter is not None and not cancel_waiter.done():
            cancel_waiter.cancel()
        if not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)


def _call_timeout(config: CapabilityConfig, signals: _RunSignals) -> tuple[float | None, bool]:
    """Return the timeout for one call and whether the run deadline bounds it."""

    remaining = signals.remaining()
    if remaining is None:
        return config.timeout_seconds, False
    if config.timeout_seconds is None or remaining <= config.timeout_seconds:
        return remaining, True
    return config.timeout_seconds, False


async def _run_attachment(
    capability: Capability,
    config: CapabilityConfig,
    context: CapabilityContext,
    selected: SelectedAttachment,
    candidates: tuple[Candidate, ...],
    registry: ProviderRegistry,
    signals: _RunSignals,
) -> _AttachmentRun:
    run = _AttachmentRun(selected=selected)
    attachment: MediaAttachment = selected.attachment

    if signals.should_stop():
        run.cancelled = True
        return run

    try:
        size = attachment.size()
    except OSError as exc:
        logger.warning("Attachment %s could not be read: %s", selected.index, exc)
        run.failures.append({"message": format_unavailable_error(exc)})
        return run

    if config.max_bytes is not None and size is not None and size > config.max_bytes:
        run.failures.append({"message": _too_large(size, config.max_bytes)})
        return run

    try:
        data = attachment.read_bytes()
    except Exception as exc:
        logger.warning("Attachment %s could not be read: %s", selected.index, exc)
        run.failures.append({"message": format_unavailable_error(exc)})
        return run

    # A file can grow between stat and read.
    if config.max_bytes is not None and len(data) > config.max_bytes:
        run.failures.append({"message": _too_large(len(data), config.max_bytes)})
        return run

    for candidate in candidates:
        if signals.should_stop():
            run.cancelled = True
            break

        descriptor = registry.get(candidate.provider)
        model = candidate.model
        if model is None and descriptor is not None:
            model = descriptor.default_model(capability)

        request = MediaRequest(
            data=data,
            filename=attachment.resolved_filename,
            mime_type=attachment.resolved_mime_type,
            model=model,
            prompt=config.prompt,
            language=config.language,
            metadata=context.as_metadata(),
        )

        call_timeout, deadline_bound = _call_timeout(config, signals)
        started = time.perf_counter()
        try:
            result = await _invoke_once(
                registry,
                capability,
                candidate,
                request,
                call_timeout=call_timeout,
                deadline_bound=deadline_bound,
                signals=signals,
            )
            output = _build_output(capability, selected, candidate, model, result)
        except _Stopped:
            elapsed = time.perf_counter() - started
            run.cancelled = True
            run.attempts.append(
                AttemptRecord(
                    attachment_index=selected.index,
                    provider=candidate.provider,
                    model=model,
                    status=AttemptStatus.CANCELLED,
                    error=REASON_CANCELLED,
                    elapsed_ms=int(elapsed * 1000),
                )
            )
            record_capability_attempt(
                capability=capability.value,
                provider=candidate.provider,
                model=model,
                attachment_index=selected.index,
                status=AttemptStatus.CANCELLED.value,
                elapsed_seconds=elapsed,
            )
            break
        except Exception as exc:
            elapsed = time.perf_counter() - started
            kind = "timeout" if isinstance(exc, _CallTimedOut) else getattr(exc, "kind", None)
            message = describe_failure(exc)
            run.failures.append(exc)
            run.attempts.append(
                AttemptRecord(
                    attachment_index=selected.index,
                    provider=candidate.provider,
                    model=model,
                    status=AttemptStatus.FAILED,
                    error=message,
                    error_kind=kind,
                    elapsed_ms=int(elapsed * 1000),
                )
            )
            record_capability_attempt(
                capability=capability.value,
                provider=candidate.provider,
                model=model,
                attachment_index=selected.index,
                status=AttemptStatus.FAILED.value,
                elapsed_seconds=elapsed,
                error=message,
                error_kind=kind,
            )
            continue

        elapsed = time.perf_counter() - started
        used_model = output.model
        run.output = output
        run.attempts.append(
            AttemptRecord(
                attachment_index=selected.index,
                provider=candidate.provider,
                model=used_model,
                status=AttemptStatus.SUCCESS,
                elapsed_ms=int(elapsed * 1000),
            )
        )
        record_capability_attempt(
            capability=capability.value,
            provider=candidate.provider,
            model=used_model,
            attachment_index=selected.index,
            status=AttemptStatus.SUCCESS.value,
            elapsed_seconds=elapsed,
        )
        break

    return run


def _finish(
    capability: Capability,
    decision: DecisionRecord,
    outputs: tuple[CapabilityOutput, ...],
    attachment_count: int,
    context: CapabilityContext,
    started: float,
) -> RunResult:
    record_capability_decision(
        capability=capability.value,
        outcome=decision.outcome.value,
        reason=decision.reason,
        provider=decision.provider,
        model=decision.model,
        attachment_count=attachment_count,
        output_count=len(outputs),
        elapsed_seconds=time.perf_counter() - started,
        context=context.as_metadata(),
    )
    return RunResult(outputs=outputs, decision=decision, attachment_count=attachment_count)


async def run_capability(
    capability: Capability | str,
    config: CapabilityConfig,
    context: CapabilityContext | Mapping[str, Any] | None,
    attachments: Iterable[MediaAttachment] | None,
    registry: ProviderRegistry,
    *,
    cancel_event: asyncio.Event | None = None,
    timeout: float | None = None,
    concurrent: bool = False,
) -> RunResult:
    """Run ``capability`` over ``attachments`` and return outputs plus a decision.

    Args:
        capability: Capability to run (``audio``, ``image`` or ``video``).
        config: Merged configuration from ``merge_capability_config``.
        context: Origin of the request; forwarded to providers as metadata.
        attachments: Ordered attachment source; read, never mutated.
        registry: Provider registry shared across runs.
        cancel_event: Stops further candidates/attachments once set.
        timeout: Overall deadline in seconds for the whole run.
        concurrent: Process attachments concurrently; outputs keep input order.
    """

    resolved = Capability.parse(capability)
    if context is None:
        run_context = CapabilityContext()
    elif isinstance(context, CapabilityContext):
        run_context = context
    else:
        run_context = CapabilityContext(
            **{key: context.get(key) for key in ("channel", "sender_id", "session_id", "message_id")}
        )
    started = time.perf_counter()

    resolution = resolve_capability(resolved, config, registry)
    if not resolution.enabled:
        outcome = (
            DecisionOutcome.DISABLED if config.enabled is False else DecisionOutcome.UNAVAILABLE
        )
        decision = DecisionRecord(
            capability=resolved.value,
            outcome=outcome,
            reason=resolution.reason,
            notes=resolution.notes,
        )
        return _finish(resolved, decision, (), 0, run_context, started)

    source = list(attachments or ())
    selected = select_attachments(source, resolved, config.attachments)
    notes = resolution.notes
    skipped = count_matching(source, resolved) - len(selected)
    if skipped > 0:
        notes = notes + (f"{skipped} matching attachment(s) skipped by attachment policy",)
    if not selected:
        decision = DecisionRecord(
            capability=resolved.value,
            outcome=DecisionOutcome.UNAVAILABLE,
            reason=REASON_NO_ATTACHMENTS,
            notes=notes,
        )
        return _finish(resolved, decision, (), 0, run_context, started)

    signals = _RunSignals(
        cancel_event=cancel_event,
        deadline=(time.monotonic() + timeout) if timeout is not None else None,
    )

    if concurrent:
        # Siblings always run to completion before any unexpected error is re-raised.
        gathered = await asyncio.gather(
            *(
                _run_attachment(
                    resolved, config, run_context, item, resolution.candidates, registry, signals
                )
                for item in selected
            ),
            return_exceptions=True,
        )
        for item in gathered:
            if isinstance(item, BaseException):
                raise item
        runs = list(gathered)
    else:
        runs = []
        for item in selected:
            runs.append(
                await _run_attachment(
                    resolved, config, run_context, item, resolution.candidates, registry, signals
                )
            )

    outputs = tuple(run.output for run in runs if run.output is not None)
    attachment_decisions = tuple(run.decision() for run in runs)
    attempts = tuple(attempt for run in runs for attempt in run.attempts)
    failures = [failure for run in runs for failure in run.failures]

    if outputs:
        outcome = DecisionOutcome.SUCCESS
        reason = "" if len(outputs) == len(runs) else _first_failure_reason(runs)
    else:
        outcome = DecisionOutcome.ERROR
        if signals.stopped:
            reason = REASON_CANCELLED
        else:
            reason = _summarise_failures(failures)

    last_success = outputs[-1] if outputs else None
    decision = DecisionRecord(
        capability=resolved.value,
        outcome=outcome,
        reason=reason,
        provider=last_success.provider if last_success else None,
        model=last_success.model if last_success else None,
        attempts=attempts,
        attachments=attachment_decisions,
        notes=notes,
        cancelled=signals.stopped,
    )
    return _finish(resolved, decision, outputs, len(runs), run_context, started)


def _first_failure_reason(runs: Iterable[_AttachmentRun]) -> str:
    for run in runs:
        if run.output is None:
            reason = run.decision().reason
            if reason:
                return reason
    return ""


__all__ = [
    "CapabilityContext",
    "REASON_CANCELLED",
    "REASON_NO_ATTACHMENTS",
    "run_capability",
]
