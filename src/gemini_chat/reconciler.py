"""Decode endpoint responses and turn request outcomes into terminal turn states.

Every request attempt ends in exactly one of four outcomes:

- ``TransportFailure``: no response was obtained (connection, DNS, timeout).
- ``ApiError``: a response arrived but the endpoint reported a failure.
- ``ApiSuccess``: a well-formed reply with candidate text.
- ``MalformedSuccess``: a success status whose body is not the expected shape.

All checks on the response shape live in :func:`decode_response`.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Any, Union

from .attachments import AttachmentStore
from .conversation import ConversationLog, Turn, TurnStatus

LOGGER = logging.getLogger(__name__)

MALFORMED_RESPONSE_MESSAGE = "Received a malformed response from the model."

_BOLD_MARKERS = re.compile(r"\*\*(.*?)\*\*")


@dataclass(frozen=True)
class TransportFailure:
    message: str


@dataclass(frozen=True)
class ApiError:
    status_code: int
    message: str


@dataclass(frozen=True)
class ApiSuccess:
    raw_text: str


@dataclass(frozen=True)
class MalformedSuccess:
    detail: str = ""


RequestOutcome = Union[TransportFailure, ApiError, ApiSuccess, MalformedSuccess]


@dataclass(frozen=True)
class FinalizedTurnUpdate:
    """Terminal status and text to apply to the pending assistant turn."""

    status: TurnStatus
    text: str

    @property
    def failed(self) -> bool:
        return self.status is TurnStatus.FAILED


def strip_bold_markers(text: str) -> str:
    """Remove ``**bold**`` delimiter pairs, keep their content, and trim."""
    return _BOLD_MARKERS.sub(r"\1", text).strip()


def _error_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return None


def _candidate_text(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    if not isinstance(first, dict):
        return None
    content = first.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None


def decode_response(status_code: int, body: Any) -> RequestOutcome:
    """Classify a received response.

    Args:
        status_code: HTTP status of the response.
        body: Parsed JSON body, or ``None`` when the body was not JSON.
    """
    error_message = _error_message(body)
    if not 200 <= status_code < 300:
        return ApiError(status_code, error_message or f"HTTP {status_code}")
    if error_message is not None:
        return ApiError(status_code, error_message)

    text = _candidate_text(body)
    if text is None:
        detail = (
            "non-JSON body"
            if body is None
            else "missing candidates[0].content.parts[0].text"
        )
        return MalformedSuccess(detail)
    return ApiSuccess(text)


class ResponseReconciler:
    """Convert a request outcome into the final state of its assistant turn.

    Finalization always clears the session's staged attachment, matching the
    cleanup that follows every request regardless of how it ended.
    """

    def __init__(self, attachments: AttachmentStore) -> None:
        self.attachments = attachments

    def reconcile(self, outcome: RequestOutcome) -> FinalizedTurnUpdate:
        """Return the terminal update for ``outcome``."""
        try:
            return self._classify(outcome)
        finally:
            self.attachments.clear()

    def finalize(
        self, log: ConversationLog, turn: Turn, outcome: RequestOutcome
    ) -> Turn:
        """Reconcile ``outcome`` and write the result onto ``turn`` in ``log``."""
        update = self.reconcile(outcome)
        return log.finalize(turn.turn_id, update.status, update.text)

    def _classify(self, outcome: RequestOutcome) -> FinalizedTurnUpdate:
        if isinstance(outcome, ApiSuccess):
            text = strip_bold_markers(outcome.raw_text)
            LOGGER.info(
                "reconcile.complete",
                extra={"event": "reconcile.complete", "length": len(text)},
            )
            return FinalizedTurnUpdate(TurnStatus.COMPLETE, text)

        if isinstance(outcome, TransportFailure):
            LOGGER.warning(
                "reconcile.transport_failure",
                extra={"event": "reconcile.transport_failure", "error": outcome.message},
            )
            return FinalizedTurnUpdate(TurnStatus.FAILED, outcome.message)

        if isinstance(outcome, ApiError):
            LOGGER.warning(
                "reconcile.api_error",
                extra={
                    "event": "reconcile.api_error",
                    "status_code": outcome.status_code,
                    "error": outcome.message,
                },
            )
            return FinalizedTurnUpdate(TurnStatus.FAILED, outcome.message)

        if isinstance(outcome, MalformedSuccess):
            # Should not happen against the real endpoint.
            LOGGER.error(
                "reconcile.malformed_response",
                extra={"event": "reconcile.malformed_response", "detail": outcome.detail},
            )
            return FinalizedTurnUpdate(TurnStatus.FAILED, MALFORMED_RESPONSE_MESSAGE)

        raise TypeError(f"Unsupported request outcome: {outcome!r}")
