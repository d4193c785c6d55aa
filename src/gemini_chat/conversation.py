"""Append-only conversation log and the turns it holds."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import itertools
import json
from typing import Any

from .attachments import PendingAttachment


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TurnStatus(str, Enum):
    """Lifecycle of an assistant turn."""

    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class Turn:
    """A single user or assistant message.

    User turns are fixed at creation. Assistant turns start ``PENDING`` with
    empty text and are finalized once. ``turn_id`` is assigned by the log the
    turn is appended to.
    """

    role: Role
    text: str = ""
    attachment: PendingAttachment | None = None
    status: TurnStatus | None = None
    turn_id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def user(cls, text: str, attachment: PendingAttachment | None = None) -> Turn:
        return cls(role=Role.USER, text=text, attachment=attachment)

    @classmethod
    def assistant_placeholder(cls) -> Turn:
        return cls(role=Role.ASSISTANT, status=TurnStatus.PENDING)

    @property
    def is_pending(self) -> bool:
        return self.status is TurnStatus.PENDING

    @property
    def is_failed(self) -> bool:
        return self.status is TurnStatus.FAILED


class ConversationLog:
    """Ordered turns in display order; entries are never removed or reordered."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._by_id: dict[int, Turn] = {}
        self._next_id = itertools.count(1)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    @property
    def turns(self) -> Sequence[Turn]:
        """Return a read-only snapshot for rendering."""
        return tuple(self._turns)

    def append(self, turn: Turn) -> Turn:
        """Append a turn at the end of the log and assign its ``turn_id``."""
        if turn.turn_id is not None:
            raise ValueError(f"Turn {turn.turn_id} already belongs to a log.")
        if turn.is_pending and self.pending_turn() is not None:
            raise ValueError("Only one assistant turn may be pending at a time.")
        turn.turn_id = next(self._next_id)
        self._turns.append(turn)
        self._by_id[turn.turn_id] = turn
        return turn

    def get(self, turn_id: int) -> Turn | None:
        return self._by_id.get(turn_id)

    def pending_turn(self) -> Turn | None:
        """Return the in-flight assistant turn, if any."""
        for turn in reversed(self._turns):
            if turn.is_pending:
                return turn
        return None

    def finalize(self, turn_id: int, status: TurnStatus, text: str) -> Turn:
        """Set the terminal status and text of a pending assistant turn."""
        turn = self._by_id.get(turn_id)
        if turn is None:
            raise KeyError(turn_id)
        if not turn.is_pending:
            raise ValueError(f"Turn {turn_id} is not pending.")
        if status is TurnStatus.PENDING:
            raise ValueError("A turn cannot be finalized as pending.")
        turn.status = status
        turn.text = text
        return turn

    def export_json(self) -> str:
        """Export turns with a stable field order (attachment bytes omitted)."""
        items: list[dict[str, Any]] = []
        for turn in self._turns:
            item: dict[str, Any] = {"role": turn.role.value, "text": turn.text}
            if turn.attachment is not None:
                item["attachment"] = {
                    "media_type": turn.attachment.media_type,
                    "size": turn.attachment.size,
                }
            if turn.status is not None:
                item["status"] = turn.status.value
            items.append(item)
        return json.dumps(items, ensure_ascii=False, separators=(",", ":"))
