"""Scrollable conversation view widget."""

from __future__ import annotations

from textual.containers import VerticalScroll

from ..conversation import Role, Turn, TurnStatus
from .message import MessageBubble, describe_attachment


class ConversationView(VerticalScroll):
    """A scrollable container that hosts one bubble per turn."""

    def __init__(self, *args, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(*args, **kwargs)
        self._bubbles: dict[int, MessageBubble] = {}

    def bubble_for(self, turn_id: int) -> MessageBubble | None:
        return self._bubbles.get(turn_id)

    async def add_turn(self, turn: Turn, timestamp: str = "") -> MessageBubble:
        """Create, mount, and scroll to a bubble for ``turn``."""
        attachment_label = ""
        if turn.attachment is not None:
            attachment_label = describe_attachment(
                turn.attachment.media_type, turn.attachment.size
            )
        bubble = MessageBubble(
            content=turn.text,
            role=turn.role.value,
            timestamp=timestamp,
            attachment_label=attachment_label,
            turn_id=turn.turn_id,
        )
        bubble.add_class(f"message-{turn.role.value}")
        if turn.role is Role.ASSISTANT and turn.is_pending:
            bubble.add_class("thinking")
        self._bubbles[turn.turn_id] = bubble
        await self.mount(bubble)
        self.scroll_end(animate=True)
        return bubble

    def finalize_turn(self, turn: Turn) -> MessageBubble | None:
        """Swap the pending indicator for the final reply or error text."""
        bubble = self._bubbles.get(turn.turn_id)
        if bubble is None:
            return None
        if turn.status is TurnStatus.FAILED:
            bubble.set_failed(turn.text)
        else:
            bubble.set_complete(turn.text)
        self.scroll_end(animate=True)
        return bubble
