"""Assemble the user turn and the outbound request body for one submit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .attachments import AttachmentStore, PendingAttachment
from .conversation import Turn


@dataclass(frozen=True)
class RequestPayload:
    """Content of a single ``generateContent`` request."""

    text: str
    attachment: PendingAttachment | None = None

    def parts(self) -> list[dict[str, Any]]:
        """Return the content parts: text first, inline data second if present."""
        parts: list[dict[str, Any]] = [{"text": self.text}]
        if self.attachment is not None:
            parts.append(
                {
                    "inline_data": {
                        "data": self.attachment.to_base64(),
                        "mime_type": self.attachment.media_type,
                    }
                }
            )
        return parts

    def to_json(self) -> dict[str, Any]:
        return {"contents": [{"parts": self.parts()}]}


def is_submittable(raw_text: str, attachments: AttachmentStore) -> bool:
    """Return True when there is text or a staged attachment to send."""
    return bool(raw_text.strip()) or attachments.has_pending()


class TurnBuilder:
    """Consume the staged attachment into a user turn and request payload."""

    def __init__(self, attachments: AttachmentStore) -> None:
        self.attachments = attachments

    def build(self, raw_text: str) -> tuple[Turn, RequestPayload]:
        """Build the turn and payload, taking the staged attachment exactly once.

        Callers must check :func:`is_submittable` first; empty submits are
        dropped before reaching this point.
        """
        text = raw_text.strip()
        attachment = self.attachments.take()
        return Turn.user(text, attachment), RequestPayload(text, attachment)
