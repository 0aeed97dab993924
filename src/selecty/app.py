"""Main Textual application for stylist consultations."""

from __future__ import annotations

import logging
import sys
from typing import Any

from textual.app import App
from textual.binding import Binding

from .config import load_config
from .logging_utils import configure_logging
from .models import BookingRequest
from .screens import BookingScreen, ChatScreen, ProviderListScreen
from .service import ConsultationService
from .widgets.provider_card import ProviderCard

LOGGER = logging.getLogger(__name__)


class SelectyApp(App[None]):
    """Browse stylists, consult them in a chat, and request bookings."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    Header {
        border-bottom: solid $panel;
        background: $surface;
    }

    Footer {
        border-top: solid $panel;
        background: $surface;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_message": "Send",
        "toggle_attachments": "Attach",
        "go_back": "Back",
        "quit": "Quit",
    }

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        service: ConsultationService | None = None,
    ) -> None:
        self.config = config or load_config()
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
        self.service = service or ConsultationService(self.config)
        self.service.booking.subscribe(self._on_booking_requested)
        self._binding_specs = self._binding_specs_from_config(self.config)
        super().__init__()

    @classmethod
    def _binding_specs_from_config(cls, config: dict[str, Any]) -> list[Binding]:
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

    def on_mount(self) -> None:
        self.title = self.window_title
        self.sub_title = f"{len(self.service.providers)} stylists"
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )
        self.push_screen(ProviderListScreen(self.service.providers))

    async def on_unmount(self) -> None:
        """Tear down any open consultation during shutdown."""
        await self.service.close()

    # -- provider list events ----------------------------------------------

    async def on_provider_card_consult_requested(
        self, event: ProviderCard.ConsultRequested
    ) -> None:
        session = await self.service.select_provider(event.provider)
        self.sub_title = f"{event.provider.name} ({event.provider.status_label})"
        await self.push_screen(
            ChatScreen(
                session,
                show_timestamps=bool(self.config["chat"].get("show_timestamps", True)),
            )
        )

    def on_provider_card_book_requested(self, event: ProviderCard.BookRequested) -> None:
        provider = event.provider

        def _submit(result: tuple[str, str] | None) -> None:
            if result is None:
                return
            date, time = result
            self.service.request_booking(provider, date, time)

        self.push_screen(BookingScreen(provider), callback=_submit)

    def _on_booking_requested(self, booking: BookingRequest) -> None:
        self.notify(
            f"{booking.provider.name}: {booking.date} {booking.time}",
            title="予約リクエスト",
        )

    # -- keybind actions ---------------------------------------------------

    def _chat_screen(self) -> ChatScreen | None:
        screen = self.screen
        return screen if isinstance(screen, ChatScreen) else None

    def action_send_message(self) -> None:
        chat = self._chat_screen()
        if chat is not None:
            chat.action_send_message()

    def action_toggle_attachments(self) -> None:
        chat = self._chat_screen()
        if chat is not None:
            chat.action_toggle_attachments()

    async def action_go_back(self) -> None:
        if self._chat_screen() is None:
            return
        self.pop_screen()
        await self.service.back()
        self.sub_title = f"{len(self.service.providers)} stylists"

    async def action_quit(self) -> None:
        """Exit the app."""
        self.exit()
