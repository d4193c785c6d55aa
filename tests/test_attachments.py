"""Tests for the single-slot attachment store and file loading."""

from __future__ import annotations

import base64
from pathlib import Path
import tempfile
import unittest

from gemini_chat.attachments import (
    DEFAULT_MEDIA_TYPE,
    AttachmentStore,
    PendingAttachment,
    load_attachment,
)
from gemini_chat.exceptions import AttachmentError


class AttachmentStoreTests(unittest.TestCase):
    """Validate stage / peek / take / clear semantics."""

    def test_take_returns_staged_value_and_empties_store(self) -> None:
        store = AttachmentStore()
        store.stage(b"\x89PNG", "image/png")

        taken = store.take()

        self.assertEqual(taken, PendingAttachment(b"\x89PNG", "image/png"))
        self.assertIsNone(store.peek())
        self.assertIsNone(store.take())

    def test_take_on_empty_store_returns_none(self) -> None:
        self.assertIsNone(AttachmentStore().take())

    def test_clear_after_stage_discards_attachment(self) -> None:
        store = AttachmentStore()
        store.stage(b"data", "image/jpeg")
        store.clear()
        store.clear()
        self.assertIsNone(store.take())

    def test_stage_replaces_previous_attachment(self) -> None:
        store = AttachmentStore()
        store.stage(b"first", "image/png")
        store.stage(b"second", "image/gif")
        self.assertEqual(store.take(), PendingAttachment(b"second", "image/gif"))

    def test_peek_does_not_consume(self) -> None:
        store = AttachmentStore()
        store.stage(b"data", "image/png")
        self.assertIsNotNone(store.peek())
        self.assertTrue(store.has_pending())
        self.assertIsNotNone(store.take())

    def test_base64_and_data_uri(self) -> None:
        attachment = PendingAttachment(b"hello", "text/plain")
        self.assertEqual(attachment.to_base64(), base64.b64encode(b"hello").decode())
        self.assertEqual(
            attachment.to_data_uri(), "data:text/plain;base64,aGVsbG8="
        )
        self.assertEqual(attachment.size, 5)


class LoadAttachmentTests(unittest.TestCase):
    """Validate file reading and validation before staging."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_loads_image_with_guessed_media_type(self) -> None:
        path = self.root / "photo.png"
        path.write_bytes(b"\x89PNG\r\n")
        attachment = load_attachment(
            path, max_bytes=1024, allowed_media_prefixes=("image/",)
        )
        self.assertEqual(attachment.media_type, "image/png")
        self.assertEqual(attachment.data, b"\x89PNG\r\n")

    def test_unknown_extension_falls_back_to_octet_stream(self) -> None:
        path = self.root / "blob.unknownext"
        path.write_bytes(b"\x00\x01")
        attachment = load_attachment(path, max_bytes=1024)
        self.assertEqual(attachment.media_type, DEFAULT_MEDIA_TYPE)

    def test_missing_file_is_rejected(self) -> None:
        with self.assertRaises(AttachmentError):
            load_attachment(self.root / "missing.png", max_bytes=1024)

    def test_directory_is_rejected(self) -> None:
        with self.assertRaisesRegex(AttachmentError, "Not a file"):
            load_attachment(self.root, max_bytes=1024)

    def test_oversized_file_is_rejected(self) -> None:
        path = self.root / "big.png"
        path.write_bytes(b"x" * 2048)
        with self.assertRaisesRegex(AttachmentError, "too large"):
            load_attachment(path, max_bytes=1024)

    def test_disallowed_media_type_is_rejected(self) -> None:
        path = self.root / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        with self.assertRaisesRegex(AttachmentError, "Unsupported file type"):
            load_attachment(path, max_bytes=1024, allowed_media_prefixes=("image/",))


if __name__ == "__main__":
    unittest.main()
