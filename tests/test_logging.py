"""Tests for structured logging behavior."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
import unittest

import structlog

from gemini_chat.logging_utils import build_formatter, configure_logging


class FormatterTests(unittest.TestCase):
    """Validate JSON rendering of stdlib records with extras."""

    def test_structured_formatter_includes_extra_fields(self) -> None:
        formatter = build_formatter(True)
        record = logging.LogRecord(
            name="gemini_chat.session",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="session.state.transition",
            args=(),
            exc_info=None,
        )
        record.from_state = "idle"
        record.to_state = "awaiting_response"

        data = json.loads(formatter.format(record))
        self.assertEqual(data["event"], "session.state.transition")
        self.assertEqual(data["from_state"], "idle")
        self.assertEqual(data["to_state"], "awaiting_response")
        self.assertEqual(data["logger"], "gemini_chat.session")

    def test_plain_formatter_is_not_structlog(self) -> None:
        formatter = build_formatter(False)
        self.assertNotIsInstance(formatter, structlog.stdlib.ProcessorFormatter)


class ConfigureLoggingTests(unittest.TestCase):
    """Validate configure_logging() handler setup behavior."""

    def setUp(self) -> None:
        # Preserve root logger state so tests do not pollute each other.
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            if handler not in self._original_handlers:
                handler.close()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)

    def test_stderr_handler_only_passes_app_records_at_warning(self) -> None:
        configure_logging({"level": "DEBUG", "structured": True, "log_to_file": False})
        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)

        handler = root.handlers[0]
        self.assertEqual(handler.level, logging.WARNING)
        self.assertIsInstance(handler.formatter, structlog.stdlib.ProcessorFormatter)
        app_record = logging.LogRecord(
            "gemini_chat.client", logging.WARNING, __file__, 1, "x", (), None
        )
        library_record = logging.LogRecord(
            "httpx", logging.WARNING, __file__, 1, "x", (), None
        )
        self.assertTrue(handler.filter(app_record))
        self.assertFalse(handler.filter(library_record))

    def test_noisy_loggers_set_to_warning(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        for name in ("httpx", "httpcore", "asyncio"):
            self.assertEqual(logging.getLogger(name).level, logging.WARNING)

    def test_file_handler_created(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "nested" / "app.log"
            configure_logging(
                {
                    "level": "INFO",
                    "structured": False,
                    "log_to_file": True,
                    "log_file_path": str(log_path),
                }
            )
            root = logging.getLogger()
            file_handlers = [
                h for h in root.handlers if isinstance(h, logging.FileHandler)
            ]
            self.assertEqual(len(file_handlers), 1)
            self.assertEqual(file_handlers[0].level, logging.INFO)
            self.assertTrue(log_path.exists())
            for handler in file_handlers:
                handler.close()


if __name__ == "__main__":
    unittest.main()
