"""Textual front end for a single Gemini chat session."""

from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Button, Footer, Header, Input

from .config import load_config
from .conversation import Role, Turn
from .events import (
    ATTACHMENT_CLEARED,
    ATTACHMENT_STAGED,
    SUBMIT_REJECTED,
    TURN_APPENDED,
    TURN_FINALIZED,
    Event,
    EventBus,
)
from .exceptions import AttachmentError, MissingCredentialError
from .logging_utils import configure_logging
from .screens import AttachPathScreen
from .session import SessionController
from .state import SessionState
from .widgets.conversation import ConversationView
from .widgets.input_box import InputBox
from .widgets.message import MessageBubble
from .widgets.status_bar import StatusBar

LOGGER = logging.getLogger(__name__)

HELP_TEXT = "/attach <path> stage a file  |  /detach drop it"


class GeminiChatApp(App[None]):
    """Chat window: conversation, input row with attachment preview, status bar."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #app-root {
        layout: vertical;
        width: 100%;
        height: 1fr;
        background: $background;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    InputBox {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #message_input {
        width: 1fr;
    }

    #attach_button {
        margin-left: 1;
        min-width: 10;
    }

    #send_button {
        margin-left: 1;
        min-width: 10;
    }

    #input_row {
        height: auto;
    }

    #status_bar {
        height: auto;
        padding: 0 1;
        border-top: solid $panel;
        background: $surface;
    }

    MessageBubble {
        width: 85%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        align-horizontal: right;
        background: $primary;
    }

    .message-assistant {
        align-horizontal: left;
        background: $surface;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_message": "Send",
        "attach_file": "Attach",
        "cancel_attachment": "Detach",
        "clear_input": "Clear",
        "quit": "Quit",
    }

    def __init__(
        self,
        config_path: Path | None = None,
        session: SessionController | None = None,
    ) -> None:
        self.config = load_config(config_path)
        self.window_title = str(self.config["app"]["title"])
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )

        self.event_bus = session.events if session is not None else EventBus()
        self._startup_error = ""
        if session is None:
            try:
                session = SessionController.from_config(
                    self.config, events=self.event_bus
                )
            except MissingCredentialError as exc:
                LOGGER.warning(
                    "app.session.unavailable",
                    extra={"event": "app.session.unavailable", "reason": str(exc)},
                )
                self._startup_error = str(exc)
        self.session = session
        self.model_name = str(self.config["gemini"]["model"])

        self._binding_specs = self._binding_specs_from_config(self.config)
        self._w_input: Input | None = None
        self._w_send: Button | None = None
        self._w_status: StatusBar | None = None
        self._w_conversation: ConversationView | None = None
        self._w_input_box: InputBox | None = None
        super().__init__()

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=True,
                    )
                )
        return bindings

    def compose(self) -> ComposeResult:
        yield Header(name=self.window_title)
        with Container(id="app-root"):
            yield ConversationView(id="conversation")
            yield InputBox(placeholder=str(self.config["ui"]["placeholder_text"]))
            yield StatusBar(id="status_bar")
        yield Footer()

    async def on_mount(self) -> None:
        """Register keybindings, cache widgets, and subscribe to session events."""
        self.title = self.window_title
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )

        self._w_input = self.query_one("#message_input", Input)
        self._w_send = self.query_one("#send_button", Button)
        self._w_status = self.query_one("#status_bar", StatusBar)
        self._w_conversation = self.query_one(ConversationView)
        self._w_input_box = self.query_one(InputBox)
        self.query_one("#app-root", Container).styles.background = str(
            self.config["ui"]["background_color"]
        )

        self.event_bus.subscribe(TURN_APPENDED, self._on_turn_appended)
        self.event_bus.subscribe(TURN_FINALIZED, self._on_turn_finalized)
        self.event_bus.subscribe(ATTACHMENT_STAGED, self._on_attachment_changed)
        self.event_bus.subscribe(ATTACHMENT_CLEARED, self._on_attachment_changed)
        self.event_bus.subscribe(SUBMIT_REJECTED, self._on_submit_rejected)

        if self.session is None:
            self._w_input.disabled = True
            self._w_send.disabled = True
            self.sub_title = self._startup_error
        else:
            self.sub_title = HELP_TEXT
            self._w_input.focus()
        self._update_status_bar()

    async def on_unmount(self) -> None:
        if self.session is not None:
            await self.session.aclose()

    def _timestamp(self, turn: Turn) -> str:
        """Return the local creation time of ``turn``, or "" when hidden."""
        if not bool(self.config["ui"]["show_timestamps"]):
            return ""
        return turn.created_at.astimezone().strftime("%H:%M")

    def _update_status_bar(self) -> None:
        if self._w_status is None:
            return
        awaiting = (
            self.session is not None
            and self.session.state is SessionState.AWAITING_RESPONSE
        )
        self._w_status.set_status(
            model=self.model_name,
            awaiting_response=awaiting,
            message_count=len(self.session.turns) if self.session else 0,
        )
        if self._w_send is not None and self.session is not None:
            self._w_send.disabled = awaiting

    def _style_bubble(self, bubble: MessageBubble, turn: Turn) -> None:
        """Apply the configured role colours, and the error colour to failed replies."""
        ui_cfg = self.config["ui"]
        if turn.role is Role.USER:
            bubble.styles.background = str(ui_cfg["user_message_color"])
        else:
            bubble.styles.background = str(ui_cfg["assistant_message_color"])
        bubble.styles.border = ("round", str(ui_cfg["border_color"]))
        if turn.is_failed:
            bubble.styles.color = str(ui_cfg["error_message_color"])

    async def _on_turn_appended(self, event: Event) -> None:
        if self._w_conversation is None:
            return
        turn = event.data["turn"]
        bubble = await self._w_conversation.add_turn(turn, self._timestamp(turn))
        self._style_bubble(bubble, turn)
        self._update_status_bar()

    def _on_turn_finalized(self, event: Event) -> None:
        turn = event.data["turn"]
        if self._w_conversation is not None:
            bubble = self._w_conversation.finalize_turn(turn)
            if bubble is not None:
                self._style_bubble(bubble, turn)
        self.sub_title = "Request failed." if turn.is_failed else HELP_TEXT
        self._update_status_bar()

    def _on_attachment_changed(self, event: Event) -> None:  # noqa: ARG002
        if self._w_input_box is None or self.session is None:
            return
        self._w_input_box.show_attachment(self.session.pending_attachment)

    def _on_submit_rejected(self, event: Event) -> None:  # noqa: ARG002
        self.sub_title = "Busy. Wait for the current reply to finish."

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "message_input":
            await self.send_user_message()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send_button":
            await self.send_user_message()

    async def on_input_box_attach_requested(
        self, event: InputBox.AttachRequested
    ) -> None:
        event.stop()
        await self.action_attach_file()

    async def on_input_box_cancel_attachment_requested(
        self, event: InputBox.CancelAttachmentRequested
    ) -> None:
        event.stop()
        await self.action_cancel_attachment()

    async def action_send_message(self) -> None:
        await self.send_user_message()

    async def action_attach_file(self) -> None:
        """Ask for a file path and stage the file."""
        if self.session is None:
            return
        self.push_screen(AttachPathScreen(), callback=self._on_attach_path_dismissed)

    async def _on_attach_path_dismissed(self, path: str | None) -> None:
        if path:
            await self.stage_file(path)

    async def action_cancel_attachment(self) -> None:
        if self.session is not None:
            await self.session.cancel_attachment()

    def action_clear_input(self) -> None:
        if self._w_input is not None:
            self._w_input.value = ""

    async def stage_file(self, path: str) -> None:
        """Stage ``path`` and report validation problems in the subtitle."""
        if self.session is None:
            return
        try:
            attachment = await self.session.stage_attachment_file(path)
        except AttachmentError as exc:
            LOGGER.warning(
                "app.attachment.rejected",
                extra={"event": "app.attachment.rejected", "error": str(exc)},
            )
            self.sub_title = str(exc)
            return
        self.sub_title = f"Attached {Path(path).name} ({attachment.media_type})"

    async def _handle_command(self, raw_text: str) -> bool:
        """Run a slash command; return False for text that is not a command."""
        command, _, args = raw_text.partition(" ")
        if command == "/attach":
            if args.strip():
                await self.stage_file(args.strip())
            else:
                await self.action_attach_file()
            return True
        if command == "/detach":
            await self.action_cancel_attachment()
            return True
        if command == "/help":
            self.sub_title = HELP_TEXT
            return True
        return False

    async def send_user_message(self) -> None:
        """Submit the input text (and any staged file) to the session."""
        if self.session is None or self._w_input is None:
            return
        raw_text = self._w_input.value
        stripped = raw_text.strip()
        if stripped.startswith("/") and await self._handle_command(stripped):
            self._w_input.value = ""
            return

        turn = await self.session.submit(raw_text)
        if turn is not None:
            self._w_input.value = ""
            self.sub_title = "Waiting for reply..."
        self._update_status_bar()
