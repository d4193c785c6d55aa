"""Session notifications published for the rendering layer."""

from .bus import Event, EventBus
from .domain import (
    ATTACHMENT_CLEARED,
    ATTACHMENT_STAGED,
    SESSION_EVENTS,
    SUBMIT_REJECTED,
    TURN_APPENDED,
    TURN_FINALIZED,
)

__all__ = [
    "ATTACHMENT_CLEARED",
    "ATTACHMENT_STAGED",
    "Event",
    "EventBus",
    "SESSION_EVENTS",
    "SUBMIT_REJECTED",
    "TURN_APPENDED",
    "TURN_FINALIZED",
]
