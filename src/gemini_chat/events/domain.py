"""Names of the events a session publishes.

Payload keys per event:

- ``turn.appended`` / ``turn.finalized``: ``turn`` (the :class:`Turn`).
- ``attachment.staged``: ``attachment`` (the :class:`PendingAttachment`).
- ``attachment.cleared``: ``reason`` (``"cancelled"``, ``"consumed"`` or ``"finalized"``).
- ``submit.rejected``: ``reason`` and ``text``.
"""

from __future__ import annotations

TURN_APPENDED = "turn.appended"
TURN_FINALIZED = "turn.finalized"
ATTACHMENT_STAGED = "attachment.staged"
ATTACHMENT_CLEARED = "attachment.cleared"
SUBMIT_REJECTED = "submit.rejected"

SESSION_EVENTS: frozenset[str] = frozenset(
    {
        TURN_APPENDED,
        TURN_FINALIZED,
        ATTACHMENT_STAGED,
        ATTACHMENT_CLEARED,
        SUBMIT_REJECTED,
    }
)
