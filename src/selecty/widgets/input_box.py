"""Text input row with the send button."""

from __future__ import annotations

from textual.containers import Horizontal
from textual.widgets import Button, Input


class InputBox(Horizontal):
    """Message field plus send button, shown in text mode."""

    def compose(self):  # type: ignore[override]
        yield Input(placeholder="メッセージを入力...", id="message_input")
        yield Button("Send", id="send_button", variant="success", disabled=True)

    def set_can_send(self, enabled: bool) -> None:
        """Enable or disable the send control."""
        self.query_one("#send_button", Button).disabled = not enabled

    def clear(self) -> None:
        self.query_one("#message_input", Input).value = ""
