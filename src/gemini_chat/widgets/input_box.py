"""Input row with message field, attach/send buttons, and attachment preview."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Input, Label

from ..attachments import PendingAttachment
from .message import describe_attachment


class InputBox(Vertical):
    """Input region with message field, attach button, send button, and preview strip.

    The preview strip is visible only while an attachment is staged.
    """

    DEFAULT_CSS = """
    InputBox #attachment_preview {
        height: auto;
    }
    InputBox #attachment_preview.hidden {
        display: none;
    }
    InputBox #attachment_label {
        width: 1fr;
        color: $text-muted;
    }
    """

    class AttachRequested(Message):
        """Posted when the user clicks the attach button."""

    class CancelAttachmentRequested(Message):
        """Posted when the user clicks the preview's cancel button."""

    def __init__(self, placeholder: str = "Message...", **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.placeholder = placeholder

    def compose(self) -> ComposeResult:
        with Horizontal(id="attachment_preview", classes="hidden"):
            yield Label("", id="attachment_label")
            yield Button("x", id="attachment_cancel", variant="error")
        with Horizontal(id="input_row"):
            yield Input(placeholder=self.placeholder, id="message_input")
            yield Button("Attach", id="attach_button", variant="default")
            yield Button("Send", id="send_button", variant="success")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Forward attach and cancel clicks as messages; Send bubbles up."""
        if event.button.id == "attach_button":
            event.stop()
            self.post_message(self.AttachRequested())
        elif event.button.id == "attachment_cancel":
            event.stop()
            self.post_message(self.CancelAttachmentRequested())

    def show_attachment(self, attachment: PendingAttachment | None) -> None:
        """Show the preview strip for ``attachment`` or hide it when None."""
        preview = self.query_one("#attachment_preview", Horizontal)
        label = self.query_one("#attachment_label", Label)
        if attachment is None:
            label.update("")
            preview.add_class("hidden")
            return
        label.update(describe_attachment(attachment.media_type, attachment.size))
        preview.remove_class("hidden")
