"""Tests for turn and request payload assembly."""

from __future__ import annotations

import base64
import unittest

from gemini_chat.attachments import AttachmentStore
from gemini_chat.conversation import Role
from gemini_chat.turn_builder import RequestPayload, TurnBuilder, is_submittable


class TurnBuilderTests(unittest.TestCase):
    """Validate trimming, single-use attachments, and part ordering."""

    def setUp(self) -> None:
        self.store = AttachmentStore()
        self.builder = TurnBuilder(self.store)

    def test_text_only_payload_has_single_text_part(self) -> None:
        turn, payload = self.builder.build("  Hi there \n")
        self.assertEqual(turn.role, Role.USER)
        self.assertEqual(turn.text, "Hi there")
        self.assertIsNone(turn.attachment)
        self.assertEqual(payload.to_json(), {"contents": [{"parts": [{"text": "Hi there"}]}]})

    def test_attachment_part_follows_text_part(self) -> None:
        self.store.stage(b"\x89PNG", "image/png")
        turn, payload = self.builder.build("describe this")

        parts = payload.to_json()["contents"][0]["parts"]
        self.assertEqual(parts[0], {"text": "describe this"})
        self.assertEqual(
            parts[1],
            {
                "inline_data": {
                    "data": base64.b64encode(b"\x89PNG").decode("ascii"),
                    "mime_type": "image/png",
                }
            },
        )
        self.assertIs(turn.attachment, payload.attachment)
        self.assertIsNone(self.store.peek())

    def test_attachment_is_single_use(self) -> None:
        self.store.stage(b"data", "image/png")
        self.builder.build("first")
        _turn, payload = self.builder.build("second")
        self.assertIsNone(payload.attachment)
        self.assertEqual(len(payload.parts()), 1)

    def test_attachment_only_submit_keeps_empty_text_part(self) -> None:
        self.store.stage(b"data", "image/png")
        turn, payload = self.builder.build("   ")
        self.assertEqual(turn.text, "")
        self.assertEqual(payload.parts()[0], {"text": ""})
        self.assertEqual(len(payload.parts()), 2)

    def test_is_submittable(self) -> None:
        self.assertFalse(is_submittable("   ", self.store))
        self.assertTrue(is_submittable(" x ", self.store))
        self.store.stage(b"data", "image/png")
        self.assertTrue(is_submittable("", self.store))

    def test_payload_without_attachment(self) -> None:
        self.assertEqual(RequestPayload("x").parts(), [{"text": "x"}])


if __name__ == "__main__":
    unittest.main()
