"""Status bar widget for session telemetry."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widgets import Label, Static


class StatusBar(Static):
    """Render compact runtime status information.

    Segments (left to right):
        Model: gemini-1.5-flash  |  ready  |  Messages: 4
    """

    DEFAULT_CSS = """
    StatusBar {
        layout: horizontal;
        height: auto;
    }
    StatusBar Label {
        margin-right: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Label("Model: -", id="status_model")
        yield Label("|", id="status_sep1")
        yield Label("ready", id="status_state")
        yield Label("|", id="status_sep2")
        yield Label("Messages: 0", id="status_messages")

    def on_mount(self) -> None:
        """Cache label references once after the DOM is ready."""
        self._lbl_model = self.query_one("#status_model", Label)
        self._lbl_state = self.query_one("#status_state", Label)
        self._lbl_messages = self.query_one("#status_messages", Label)

    @staticmethod
    def state_label(awaiting_response: bool) -> str:
        return "waiting for reply" if awaiting_response else "ready"

    def set_status(
        self, *, model: str, awaiting_response: bool, message_count: int
    ) -> None:
        """Update all status segment labels."""
        self._lbl_model.update(f"Model: {model}")
        self._lbl_state.update(self.state_label(awaiting_response))
        self._lbl_messages.update(f"Messages: {message_count}")
