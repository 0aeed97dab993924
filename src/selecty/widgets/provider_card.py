"""Profile card for one stylist in the provider list."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Static

from ..models import Provider


class ProviderCard(Vertical):
    """Name, availability, introduction, specialty, rating and actions."""

    class ConsultRequested(Message):
        """Posted when the user wants to chat with the provider."""

        def __init__(self, provider: Provider) -> None:
            super().__init__()
            self.provider = provider

    class BookRequested(Message):
        """Posted when the user wants to book the provider."""

        def __init__(self, provider: Provider) -> None:
            super().__init__()
            self.provider = provider

    def __init__(self, provider: Provider, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.provider = provider
        self.add_class("online" if provider.is_online else "offline")

    def compose(self) -> ComposeResult:
        provider = self.provider
        yield Static(f"[b]{provider.name}[/b]  {provider.status_label}", classes="card-title")
        if provider.introduction:
            yield Static(provider.introduction, classes="card-intro", markup=False)
        yield Static(
            f"{provider.specialty}  |  評価: {provider.rating}/5", classes="card-meta"
        )
        with Horizontal(classes="card-actions"):
            yield Button("相談する", id=f"consult-{provider.id}", variant="primary")
            yield Button("予約", id=f"book-{provider.id}")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id.startswith("consult-"):
            event.stop()
            self.post_message(self.ConsultRequested(self.provider))
        elif button_id.startswith("book-"):
            event.stop()
            self.post_message(self.BookRequested(self.provider))
