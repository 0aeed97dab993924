"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..models import Message, Sender


def describe_image(message: Message) -> str:
    """Return the one-line placeholder shown for an attached image."""
    if message.image is None:
        return ""
    image = message.image
    return f"[image {image.mime_type} {image.size_label} from {image.origin}]"


class MessageBubble(Vertical):
    """Render a single chat message with sender, optional timestamp and image line."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
    }
    MessageBubble > #image-block {
        color: $text-muted;
        padding: 0 1;
        border-left: solid $accent;
        margin-top: 1;
    }
    """

    def __init__(
        self,
        message: Message,
        provider_name: str = "",
        show_timestamp: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.message = message
        self.provider_name = provider_name
        self.show_timestamp = show_timestamp
        self.add_class(f"role-{message.sender.value}")

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly sender label."""
        if self.message.sender is Sender.USER:
            return "You"
        return self.provider_name or "Stylist"

    def _compose_header(self) -> str:
        if self.show_timestamp:
            stamp = self.message.created_at.astimezone().strftime("%H:%M")
            return f"**{self.role_prefix}**  _{stamp}_"
        return f"**{self.role_prefix}**"

    def compose(self) -> ComposeResult:
        yield Static(Markdown(self._compose_header()), id="header-block")
        text = self.message.text.rstrip()
        if text:
            yield Static(text, id="content-block", markup=False)
        if self.message.image is not None:
            yield Static(describe_image(self.message), id="image-block", markup=False)
