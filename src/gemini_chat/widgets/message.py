"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

THINKING_TEXT = "Thinking..."


def describe_attachment(media_type: str, size: int) -> str:
    """Return a one-line label for an attachment shown inside a bubble."""
    if size >= 1024 * 1024:
        human = f"{size / (1024 * 1024):.1f} MB"
    elif size >= 1024:
        human = f"{size / 1024:.1f} KB"
    else:
        human = f"{size} B"
    return f"[attachment: {media_type}, {human}]"


class MessageBubble(Vertical):
    """Render a single turn with role header, optional attachment line, and body.

    Assistant bubbles carry the ``thinking`` class while their turn is pending
    and the ``failed`` class when it ended in an error.
    """

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
    }
    MessageBubble > #attachment-block {
        color: $text-muted;
    }
    MessageBubble > #content-block {
        height: auto;
    }
    MessageBubble.thinking > #content-block {
        color: $text-muted;
        text-style: italic;
    }
    MessageBubble.failed > #content-block {
        color: $error;
    }
    """

    def __init__(
        self,
        content: str,
        role: str,
        timestamp: str = "",
        attachment_label: str = "",
        turn_id: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.message_content = content
        self.role = role
        self.timestamp = timestamp
        self.attachment_label = attachment_label
        self.turn_id = turn_id
        self.add_class(f"role-{role}")

        self._header_widget: Static | None = None
        self._attachment_widget: Static | None = None
        self._content_widget: Static | None = None

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly role label."""
        return "You" if self.role == "user" else "Assistant"

    @property
    def is_thinking(self) -> bool:
        return self.has_class("thinking")

    @property
    def is_failed(self) -> bool:
        return self.has_class("failed")

    def _compose_header(self) -> str:
        if self.timestamp:
            return f"**{self.role_prefix}**  _{self.timestamp}_"
        return f"**{self.role_prefix}**"

    def compose(self) -> ComposeResult:
        self._header_widget = Static(
            Markdown(self._compose_header()), id="header-block"
        )
        self._attachment_widget = Static(
            Text(self.attachment_label), id="attachment-block"
        )
        self._attachment_widget.display = bool(self.attachment_label)
        self._content_widget = Static("", id="content-block")

        yield self._header_widget
        yield self._attachment_widget
        yield self._content_widget

    def on_mount(self) -> None:
        self._refresh_content()

    def _refresh_content(self) -> None:
        if self._content_widget is None:
            return
        if self.is_thinking:
            self._content_widget.update(Text(THINKING_TEXT))
            return
        # Reply text is rendered literally; bold markers were stripped upstream.
        self._content_widget.update(Text(self.message_content.rstrip()))

    def set_content(self, content: str) -> None:
        """Update message content and rerender."""
        self.message_content = content
        self._refresh_content()

    def set_thinking(self) -> None:
        """Show the waiting indicator until the turn is finalized."""
        self.remove_class("failed")
        self.add_class("thinking")
        self._refresh_content()

    def set_complete(self, content: str) -> None:
        self.remove_class("thinking")
        self.remove_class("failed")
        self.set_content(content)

    def set_failed(self, error_text: str) -> None:
        """Show ``error_text`` in the error style."""
        self.remove_class("thinking")
        self.add_class("failed")
        self.set_content(error_text)
