"""Tests for the append-only conversation log."""

from __future__ import annotations

import json
import unittest

from gemini_chat.attachments import PendingAttachment
from gemini_chat.conversation import ConversationLog, Role, Turn, TurnStatus


class ConversationLogTests(unittest.TestCase):
    """Validate ordering, identity updates, and the single-pending rule."""

    def test_append_preserves_insertion_order(self) -> None:
        log = ConversationLog()
        first = log.append(Turn.user("one"))
        second = log.append(Turn.assistant_placeholder())
        self.assertEqual([t.turn_id for t in log.turns], [first.turn_id, second.turn_id])
        self.assertEqual(len(log), 2)

    def test_each_log_numbers_its_own_turns(self) -> None:
        first_log = ConversationLog()
        second_log = ConversationLog()
        detached = Turn.user("not appended")

        self.assertEqual(first_log.append(Turn.user("a")).turn_id, 1)
        self.assertEqual(first_log.append(Turn.user("b")).turn_id, 2)
        self.assertEqual(second_log.append(Turn.user("c")).turn_id, 1)
        self.assertIsNone(detached.turn_id)

    def test_turns_view_is_read_only_snapshot(self) -> None:
        log = ConversationLog()
        log.append(Turn.user("one"))
        view = log.turns
        log.append(Turn.user("two"))
        self.assertEqual(len(view), 1)
        self.assertIsInstance(view, tuple)

    def test_placeholder_starts_pending_and_empty(self) -> None:
        turn = Turn.assistant_placeholder()
        self.assertEqual(turn.role, Role.ASSISTANT)
        self.assertEqual(turn.text, "")
        self.assertTrue(turn.is_pending)

    def test_user_turn_has_no_status(self) -> None:
        turn = Turn.user("hi", PendingAttachment(b"x", "image/png"))
        self.assertIsNone(turn.status)
        self.assertEqual(turn.attachment.media_type, "image/png")

    def test_second_pending_turn_is_refused(self) -> None:
        log = ConversationLog()
        log.append(Turn.assistant_placeholder())
        with self.assertRaises(ValueError):
            log.append(Turn.assistant_placeholder())

    def test_same_turn_cannot_be_appended_twice(self) -> None:
        log = ConversationLog()
        turn = log.append(Turn.user("hi"))
        with self.assertRaises(ValueError):
            log.append(turn)

    def test_finalize_updates_turn_in_place(self) -> None:
        log = ConversationLog()
        log.append(Turn.user("hi"))
        pending = log.append(Turn.assistant_placeholder())

        log.finalize(pending.turn_id, TurnStatus.COMPLETE, "hello")

        self.assertIs(log.turns[1], pending)
        self.assertEqual(pending.status, TurnStatus.COMPLETE)
        self.assertEqual(pending.text, "hello")
        self.assertIsNone(log.pending_turn())

    def test_finalize_only_once(self) -> None:
        log = ConversationLog()
        pending = log.append(Turn.assistant_placeholder())
        log.finalize(pending.turn_id, TurnStatus.FAILED, "boom")
        with self.assertRaises(ValueError):
            log.finalize(pending.turn_id, TurnStatus.COMPLETE, "late")

    def test_finalize_rejects_pending_status_and_unknown_ids(self) -> None:
        log = ConversationLog()
        pending = log.append(Turn.assistant_placeholder())
        with self.assertRaises(ValueError):
            log.finalize(pending.turn_id, TurnStatus.PENDING, "")
        with self.assertRaises(KeyError):
            log.finalize(-1, TurnStatus.COMPLETE, "")

    def test_export_json_omits_attachment_bytes(self) -> None:
        log = ConversationLog()
        log.append(Turn.user("look", PendingAttachment(b"abc", "image/png")))
        log.append(Turn.assistant_placeholder())
        parsed = json.loads(log.export_json())
        self.assertEqual(
            parsed[0],
            {
                "role": "user",
                "text": "look",
                "attachment": {"media_type": "image/png", "size": 3},
            },
        )
        self.assertEqual(parsed[1], {"role": "assistant", "text": "", "status": "pending"})


if __name__ == "__main__":
    unittest.main()
