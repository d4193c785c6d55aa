"""Top-level package for gemini-chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import GeminiChatApp
    from .attachments import AttachmentStore, PendingAttachment
    from .config import ensure_config_dir, load_config
    from .conversation import ConversationLog, Role, Turn, TurnStatus
    from .exceptions import (
        AttachmentError,
        ConfigValidationError,
        GeminiChatError,
        GeminiConnectionError,
        MissingCredentialError,
    )
    from .reconciler import ResponseReconciler
    from .session import SessionController
    from .state import SessionState, StateManager
    from .turn_builder import RequestPayload, TurnBuilder

__all__ = [
    "AttachmentError",
    "AttachmentStore",
    "ConfigValidationError",
    "ConversationLog",
    "GeminiChatApp",
    "GeminiChatError",
    "GeminiConnectionError",
    "MissingCredentialError",
    "PendingAttachment",
    "RequestPayload",
    "ResponseReconciler",
    "Role",
    "SessionController",
    "SessionState",
    "StateManager",
    "Turn",
    "TurnBuilder",
    "TurnStatus",
    "ensure_config_dir",
    "load_config",
]

_LAZY_EXPORTS: dict[str, str] = {
    "AttachmentError": "exceptions",
    "AttachmentStore": "attachments",
    "ConfigValidationError": "exceptions",
    "ConversationLog": "conversation",
    "GeminiChatApp": "app",
    "GeminiChatError": "exceptions",
    "GeminiConnectionError": "exceptions",
    "MissingCredentialError": "exceptions",
    "PendingAttachment": "attachments",
    "RequestPayload": "turn_builder",
    "ResponseReconciler": "reconciler",
    "Role": "conversation",
    "SessionController": "session",
    "SessionState": "state",
    "StateManager": "state",
    "Turn": "conversation",
    "TurnBuilder": "turn_builder",
    "TurnStatus": "conversation",
    "ensure_config_dir": "config",
    "load_config": "config",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep UI dependencies optional at import time."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    module = import_module(f".{module_name}", __name__)
    return getattr(module, name)
