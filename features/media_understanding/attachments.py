"""Media attachments and per-capability attachment selection."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence

from config.media.defaults import CAPABILITY_MIME_PREFIXES, DEFAULT_MAX_ATTACHMENTS_ALL
from core.providers.base import Capability
from features.media_understanding.config import AttachmentPolicy


@dataclass(frozen=True, slots=True)
class MediaAttachment:
    """One unit of inbound media; the payload lives in memory or on disk."""

    data: bytes | None = None
    path: Path | None = None
    filename: str | None = None
    mime_type: str | None = None

    @property
    def resolved_filename(self) -> str | None:
        if self.filename:
            return self.filename
        if self.path is not None:
            return Path(self.path).name
        return None

    @property
    def resolved_mime_type(self) -> str | None:
        if self.mime_type:
            return self.mime_type.split(";", 1)[0].strip().lower()
        name = self.resolved_filename
        if name:
            guessed, _ = mimetypes.guess_type(name)
            return guessed
        return None

    def size(self) -> int | None:
        if self.data is not None:
            return len(self.data)
        if self.path is not None:
            return Path(self.path).stat().st_size
        return None

    def read_bytes(self) -> bytes:
        """Return the payload, loading it from ``path`` when required."""

        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError("attachment has neither data nor path")
        return Path(self.path).read_bytes()

    def matches(self, capability: Capability) -> bool:
        mime_type = self.resolved_mime_type
        if not mime_type:
            return False
        return mime_type.startswith(CAPABILITY_MIME_PREFIXES[capability.value])


@dataclass(frozen=True, slots=True)
class SelectedAttachment:
    """Attachment chosen for a run, keeping its position in the source."""

    index: int
    attachment: MediaAttachment


def select_attachments(
    attachments: Iterable[MediaAttachment] | None,
    capability: Capability | str,
    policy: AttachmentPolicy,
) -> List[SelectedAttachment]:
    """Return the attachments a run should process, in source order."""

    resolved = Capability.parse(capability)
    source: Sequence[MediaAttachment] = list(attachments or ())
    matching = [
        SelectedAttachment(index=index, attachment=attachment)
        for index, attachment in enumerate(source)
        if attachment.matches(resolved)
    ]
    if policy.mode == "first":
        return matching[:1]
    limit = policy.max_attachments or DEFAULT_MAX_ATTACHMENTS_ALL
    return matching[: max(limit, 1)]


def count_matching(
    attachments: Iterable[MediaAttachment] | None, capability: Capability | str
) -> int:
    resolved = Capability.parse(capability)
    return sum(1 for attachment in attachments or () if attachment.matches(resolved))


__all__ = ["MediaAttachment", "SelectedAttachment", "count_matching", "select_attachments"]
