"""Decision record returned by every capability run.

Downstream dispatch and debug tooling may only depend on
``decision.outcome`` and ``outputs``; the remaining fields are diagnostic.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping


class DecisionOutcome(str, Enum):
    SUCCESS = "success"
    DISABLED = "disabled"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


class AttemptStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class AttemptRecord:
    """One provider invocation made for one attachment."""

    attachment_index: int
    provider: str
    model: str | None
    status: AttemptStatus
    error: str | None = None
    error_kind: str | None = None
    elapsed_ms: int = 0


@dataclass(frozen=True, slots=True)
class AttachmentDecision:
    """Final state of one attachment's candidate loop."""

    attachment_index: int
    succeeded: bool
    provider: str | None = None
    model: str | None = None
    reason: str = ""
    cancelled: bool = False


@dataclass(frozen=True, slots=True)
class CapabilityOutput:
    """Successful provider result for one attachment."""

    capability: str
    attachment_index: int
    text: str
    provider: str
    model: str | None = None
    language: str | None = None
    filename: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata or {})))

    def to_dict(self) -> Dict[str, Any]:
        return {item.name: _plain(getattr(self, item.name)) for item in fields(self)}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class DecisionRecord:
    capability: str
    outcome: DecisionOutcome
    reason: str = ""
    provider: str | None = None
    model: str | None = None
    attempts: tuple[AttemptRecord, ...] = ()
    attachments: tuple[AttachmentDecision, ...] = ()
    notes: tuple[str, ...] = ()
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON friendly copy for logging and debug views."""

        return _plain(asdict(self))


@dataclass(frozen=True)
class RunResult:
    outputs: tuple[CapabilityOutput, ...]
    decision: DecisionRecord
    attachment_count: int = 0

    @property
    def failed_count(self) -> int:
        """Attachments that were attempted but produced no output."""

        return self.attachment_count - len(self.outputs)

    @property
    def partial(self) -> bool:
        """True when some, but not all, attachments produced an output."""

        return bool(self.outputs) and self.failed_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outputs": [output.to_dict() for output in self.outputs],
            "decision": self.decision.to_dict(),
            "attachment_count": self.attachment_count,
            "failed_count": self.failed_count,
            "partial": self.partial,
        }


__all__ = [
    "AttachmentDecision",
    "AttemptRecord",
    "AttemptStatus",
    "CapabilityOutput",
    "DecisionOutcome",
    "DecisionRecord",
    "RunResult",
]
