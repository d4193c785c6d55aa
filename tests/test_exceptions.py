"""Tests for domain exception hierarchy."""

from __future__ import annotations

import unittest

from gemini_chat.exceptions import (
    AttachmentError,
    ConfigValidationError,
    GeminiChatError,
    GeminiConnectionError,
    MissingCredentialError,
)


class ExceptionHierarchyTests(unittest.TestCase):
    """Validate exception inheritance contract."""

    def test_exception_hierarchy(self) -> None:
        self.assertTrue(issubclass(GeminiConnectionError, GeminiChatError))
        self.assertTrue(issubclass(MissingCredentialError, GeminiChatError))
        self.assertTrue(issubclass(AttachmentError, GeminiChatError))
        self.assertTrue(issubclass(ConfigValidationError, GeminiChatError))
        self.assertTrue(issubclass(GeminiChatError, RuntimeError))


if __name__ == "__main__":
    unittest.main()
