"""Single-slot attachment staging and file loading.

A session holds at most one pending attachment. Staging a new file replaces
the previous one, the same way a single-file picker behaves.
"""

from __future__ import annotations

import base64
from collections.abc import Sequence
from dataclasses import dataclass
import logging
import mimetypes
from pathlib import Path

from .exceptions import AttachmentError

LOGGER = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class PendingAttachment:
    """Binary content and media type of a file awaiting the next turn."""

    data: bytes
    media_type: str

    @property
    def size(self) -> int:
        return len(self.data)

    def to_base64(self) -> str:
        """Return the payload encoded the way the endpoint expects it."""
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.to_base64()}"


class AttachmentStore:
    """Hold at most one staged attachment for the next outgoing turn."""

    def __init__(self) -> None:
        self._pending: PendingAttachment | None = None

    def stage(self, data: bytes, media_type: str) -> PendingAttachment:
        """Stage an attachment, replacing any existing one."""
        replaced = self._pending is not None
        self._pending = PendingAttachment(data=bytes(data), media_type=media_type)
        LOGGER.debug(
            "attachment.staged",
            extra={
                "event": "attachment.staged",
                "media_type": media_type,
                "size": len(data),
                "replaced": replaced,
            },
        )
        return self._pending

    def clear(self) -> None:
        """Discard the staged attachment. Safe to call when empty."""
        self._pending = None

    def peek(self) -> PendingAttachment | None:
        """Return the staged attachment without consuming it."""
        return self._pending

    def take(self) -> PendingAttachment | None:
        """Return the staged attachment and empty the store."""
        pending, self._pending = self._pending, None
        return pending

    def has_pending(self) -> bool:
        return self._pending is not None


def guess_media_type(path: Path) -> str:
    """Guess a media type from the file name, falling back to octet-stream."""
    media_type, _encoding = mimetypes.guess_type(path.name)
    return media_type or DEFAULT_MEDIA_TYPE


def load_attachment(
    path: str | Path,
    *,
    max_bytes: int,
    allowed_media_prefixes: Sequence[str] = (),
) -> PendingAttachment:
    """Read a file from disk and validate it for staging.

    Args:
        path: Location of the selected file; ``~`` is expanded.
        max_bytes: Largest accepted file size.
        allowed_media_prefixes: Accepted media type prefixes such as
            ``"image/"``. An empty sequence accepts any type.

    Returns:
        The loaded attachment, not yet staged.

    Raises:
        AttachmentError: The file is missing, not a regular file, too large,
            of a rejected media type, or unreadable.
    """
    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise AttachmentError(f"File not found: {path}")
    if not resolved.is_file():
        raise AttachmentError(f"Not a file: {path}")

    media_type = guess_media_type(resolved)
    if allowed_media_prefixes and not any(
        media_type.startswith(prefix) for prefix in allowed_media_prefixes
    ):
        allowed = ", ".join(allowed_media_prefixes)
        raise AttachmentError(
            f"Unsupported file type {media_type!r}. Allowed: {allowed}"
        )

    try:
        size = resolved.stat().st_size
        if size > max_bytes:
            max_mb = max_bytes / (1024 * 1024)
            raise AttachmentError(f"File too large (max {max_mb:.1f}MB): {path}")
        data = resolved.read_bytes()
    except OSError as exc:
        raise AttachmentError(f"Unable to read {path}: {exc}") from exc

    return PendingAttachment(data=data, media_type=media_type)
