"""Turn lifecycle orchestration for a single chat session."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging
from pathlib import Path
from typing import Any, Protocol

from .attachments import AttachmentStore, PendingAttachment, load_attachment
from .client import GeminiClient
from .conversation import ConversationLog, Turn
from .events import (
    ATTACHMENT_CLEARED,
    ATTACHMENT_STAGED,
    SUBMIT_REJECTED,
    TURN_APPENDED,
    TURN_FINALIZED,
    EventBus,
)
from .reconciler import RequestOutcome, ResponseReconciler, TransportFailure
from .state import SessionState, StateManager
from .turn_builder import RequestPayload, TurnBuilder, is_submittable

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024


class ContentGenerator(Protocol):
    """Anything that can turn a request payload into a request outcome."""

    async def generate(self, payload: RequestPayload) -> RequestOutcome: ...


class SessionController:
    """Own the attachment slot, the conversation log, and the in-flight request.

    A submit while a reply is still pending is rejected: the input and any
    staged attachment are left untouched and ``submit.rejected`` is published.
    Every request, however it ends, finalizes its assistant turn and returns
    the session to ``IDLE``.
    """

    def __init__(
        self,
        client: ContentGenerator,
        *,
        events: EventBus | None = None,
        max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
        allowed_media_prefixes: Sequence[str] = (),
        request_timeout: float | None = None,
    ) -> None:
        self.client = client
        self.events = events or EventBus()
        self.max_attachment_bytes = max_attachment_bytes
        self.allowed_media_prefixes = tuple(allowed_media_prefixes)
        self.request_timeout = request_timeout

        self.attachments = AttachmentStore()
        self.log = ConversationLog()
        self.builder = TurnBuilder(self.attachments)
        self.reconciler = ResponseReconciler(self.attachments)
        self._state = StateManager()
        self._inflight: asyncio.Task[Turn] | None = None

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        *,
        events: EventBus | None = None,
        client: ContentGenerator | None = None,
    ) -> SessionController:
        """Build a session (and, unless given, its HTTP client) from app config."""
        gemini_cfg = config["gemini"]
        attachment_cfg = config["attachments"]
        if client is None:
            client = GeminiClient(
                api_key=str(gemini_cfg["api_key"]),
                model=str(gemini_cfg["model"]),
                base_url=str(gemini_cfg["base_url"]),
                timeout=float(gemini_cfg["timeout"]),
            )
        return cls(
            client,
            events=events,
            max_attachment_bytes=int(attachment_cfg["max_bytes"]),
            allowed_media_prefixes=list(attachment_cfg["allowed_media_prefixes"]),
        )

    @property
    def state(self) -> SessionState:
        return self._state.state

    @property
    def turns(self) -> Sequence[Turn]:
        """Read-only view of the conversation for rendering."""
        return self.log.turns

    @property
    def pending_attachment(self) -> PendingAttachment | None:
        return self.attachments.peek()

    async def stage_attachment(self, data: bytes, media_type: str) -> PendingAttachment:
        """Stage file content for the next submit, replacing any previous file."""
        attachment = self.attachments.stage(data, media_type)
        await self.events.publish(ATTACHMENT_STAGED, {"attachment": attachment})
        return attachment

    async def stage_attachment_file(self, path: str | Path) -> PendingAttachment:
        """Load ``path`` and stage it.

        Raises:
            AttachmentError: The file cannot be used as an attachment. Nothing
                is staged and any previous attachment stays in place.
        """
        loaded = load_attachment(
            path,
            max_bytes=self.max_attachment_bytes,
            allowed_media_prefixes=self.allowed_media_prefixes,
        )
        return await self.stage_attachment(loaded.data, loaded.media_type)

    async def cancel_attachment(self) -> None:
        """Discard the staged attachment, if any."""
        had_attachment = self.attachments.has_pending()
        self.attachments.clear()
        if had_attachment:
            LOGGER.info(
                "attachment.cleared",
                extra={"event": "attachment.cleared", "reason": "cancelled"},
            )
            await self.events.publish(ATTACHMENT_CLEARED, {"reason": "cancelled"})

    async def submit(self, raw_text: str) -> Turn | None:
        """Send a user turn and start the request for its reply.

        Returns:
            The pending assistant turn, or ``None`` when the submit was empty
            or rejected because a reply is still pending.
        """
        if not is_submittable(raw_text, self.attachments):
            LOGGER.debug("session.submit.empty", extra={"event": "session.submit.empty"})
            return None

        if not await self._state.transition_if(
            SessionState.IDLE, SessionState.AWAITING_RESPONSE
        ):
            LOGGER.warning(
                "session.submit.rejected",
                extra={"event": "session.submit.rejected", "reason": "awaiting_response"},
            )
            await self.events.publish(
                SUBMIT_REJECTED, {"reason": "awaiting_response", "text": raw_text}
            )
            return None

        try:
            user_turn, payload = self.builder.build(raw_text)
            self.log.append(user_turn)
            placeholder = self.log.append(Turn.assistant_placeholder())
        except Exception:
            await self._state.transition_to(SessionState.IDLE)
            raise

        LOGGER.info(
            "session.state.transition",
            extra={
                "event": "session.state.transition",
                "from_state": SessionState.IDLE.value,
                "to_state": SessionState.AWAITING_RESPONSE.value,
                "turn_id": placeholder.turn_id,
                "has_attachment": payload.attachment is not None,
            },
        )
        await self.events.publish(TURN_APPENDED, {"turn": user_turn})
        if payload.attachment is not None:
            await self.events.publish(ATTACHMENT_CLEARED, {"reason": "consumed"})
        await self.events.publish(TURN_APPENDED, {"turn": placeholder})

        self._inflight = asyncio.create_task(
            self._run_turn(placeholder, payload), name=f"turn-{placeholder.turn_id}"
        )
        return placeholder

    async def wait_until_idle(self) -> Turn | None:
        """Wait for the in-flight request, if any, and return its finalized turn."""
        task = self._inflight
        if task is None:
            return None
        return await task

    async def aclose(self) -> None:
        """Cancel the in-flight request and release the transport."""
        task = self._inflight
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        # A task cancelled before its first step never reaches its finally block.
        leftover = self.log.pending_turn()
        if leftover is not None:
            await self._finish_turn(leftover, TransportFailure("Request cancelled."))
        close = getattr(self.client, "aclose", None)
        if close is not None:
            await close()

    async def _dispatch(self, payload: RequestPayload) -> RequestOutcome:
        if self.request_timeout is None:
            return await self.client.generate(payload)
        try:
            return await asyncio.wait_for(
                self.client.generate(payload), timeout=self.request_timeout
            )
        except asyncio.TimeoutError:
            return TransportFailure(
                f"No response within {self.request_timeout:g} seconds."
            )

    async def _run_turn(self, turn: Turn, payload: RequestPayload) -> Turn:
        outcome: RequestOutcome = TransportFailure("Request cancelled.")
        try:
            outcome = await self._dispatch(payload)
        except Exception as exc:  # noqa: BLE001 - every failure ends as a failed turn.
            LOGGER.exception(
                "session.dispatch.failed",
                extra={"event": "session.dispatch.failed", "turn_id": turn.turn_id},
            )
            outcome = TransportFailure(str(exc) or type(exc).__name__)
        finally:
            await self._finish_turn(turn, outcome)
        return turn

    async def _finish_turn(self, turn: Turn, outcome: RequestOutcome) -> None:
        """Finalize ``turn``, return to IDLE, and announce both."""
        had_attachment = self.attachments.has_pending()
        self.reconciler.finalize(self.log, turn, outcome)
        await self._state.transition_to(SessionState.IDLE)
        LOGGER.info(
            "session.state.transition",
            extra={
                "event": "session.state.transition",
                "from_state": SessionState.AWAITING_RESPONSE.value,
                "to_state": SessionState.IDLE.value,
                "turn_id": turn.turn_id,
                "status": turn.status.value if turn.status else None,
            },
        )
        await self.events.publish(TURN_FINALIZED, {"turn": turn})
        if had_attachment:
            await self.events.publish(ATTACHMENT_CLEARED, {"reason": "finalized"})
