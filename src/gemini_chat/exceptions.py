"""Domain exception hierarchy for the Gemini chat client."""

from __future__ import annotations


class GeminiChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class GeminiConnectionError(GeminiChatError):
    """Raised when the generation endpoint cannot be reached."""


class MissingCredentialError(GeminiChatError):
    """Raised when no API key is available for the generation endpoint."""


class AttachmentError(GeminiChatError):
    """Raised when a selected file cannot be staged as an attachment."""


class ConfigValidationError(GeminiChatError):
    """Raised when configuration cannot be validated safely."""
