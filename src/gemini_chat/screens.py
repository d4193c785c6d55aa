"""Modal screens used by the chat app."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, Static


class AttachPathScreen(ModalScreen[str | None]):
    """Modal for collecting the path of the file to attach to the next message."""

    CSS = """
    AttachPathScreen {
        align: center middle;
    }

    #attach-dialog {
        width: 60;
        height: auto;
        padding: 1 3;
        border: round $panel;
        background: $surface;
    }

    #attach-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #attach-input {
        width: 100%;
        margin: 1 0;
    }

    #attach-error {
        color: $error;
        height: auto;
    }

    #attach-help {
        padding-top: 1;
        text-align: center;
    }
    """

    def __init__(self, title: str = "Attach file") -> None:
        super().__init__()
        self._title = title

    def compose(self) -> ComposeResult:
        with Container(id="attach-dialog"):
            yield Static(self._title, id="attach-title")
            yield Input(
                placeholder="Enter absolute or relative file path...",
                id="attach-input",
            )
            yield Static("", id="attach-error")
            yield Static("Enter to confirm  |  Esc to cancel", id="attach-help")

    def on_mount(self) -> None:
        self.query_one("#attach-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "attach-input":
            return
        event.stop()
        value = event.value.strip()
        if not value:
            self.dismiss(None)
            return
        if not Path(value).expanduser().is_file():
            self.query_one("#attach-error", Static).update(f"No such file: {value}")
            return
        self.dismiss(str(Path(value).expanduser()))

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(None)
