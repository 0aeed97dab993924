"""Scrollable conversation view widget."""

from __future__ import annotations

from textual.containers import VerticalScroll

from ..models import Message
from .message import MessageBubble


class ConversationView(VerticalScroll):
    """A scrollable container that hosts message bubbles."""

    def add_message(
        self,
        message: Message,
        provider_name: str = "",
        show_timestamp: bool = True,
    ) -> MessageBubble:
        """Create, mount, and scroll to a new message bubble."""
        bubble = MessageBubble(
            message,
            provider_name=provider_name,
            show_timestamp=show_timestamp,
        )
        bubble.add_class(f"message-{message.sender.value}")
        self.mount(bubble)
        self.scroll_end(animate=False)
        return bubble
