"""Screens for browsing providers, chatting, booking, and picking images."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging
from typing import Any

from textual.app import ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, Footer, Header, Input, Static

from .camera import VideoStream
from .dialogs import IMAGE_FILTER, has_native_file_dialog, open_native_file_dialog
from .exceptions import SelectyError
from .models import InputMode, Message, Provider
from .session import ChatSession
from .widgets.attachment_panel import AttachmentPanel
from .widgets.conversation import ConversationView
from .widgets.input_box import InputBox
from .widgets.provider_card import ProviderCard

LOGGER = logging.getLogger(__name__)

FileDialog = Callable[..., Awaitable["str | None"]]


class ImagePathScreen(ModalScreen[str | None]):
    """Fallback modal for collecting an image path when no native dialog exists."""

    CSS = """
    ImagePathScreen {
        align: center middle;
    }

    #image-path-dialog {
        width: 60;
        height: auto;
        padding: 1 3;
        border: round $panel;
        background: $surface;
    }

    #image-path-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #image-path-input {
        width: 100%;
        margin: 1 0;
    }

    #image-path-help {
        padding-top: 1;
        text-align: center;
    }
    """

    def compose(self) -> ComposeResult:
        with Container(id="image-path-dialog"):
            yield Static("画像を選択", id="image-path-title")
            yield Input(
                placeholder="Enter absolute or relative image path...",
                id="image-path-input",
            )
            yield Static("Enter to confirm  |  Esc to cancel", id="image-path-help")

    def on_mount(self) -> None:
        self.query_one("#image-path-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "image-path-input":
            return
        value = event.value.strip()
        self.dismiss(value if value else None)

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(None)


class BookingScreen(ModalScreen["tuple[str, str] | None"]):
    """Modal asking for a booking date and time."""

    CSS = """
    BookingScreen {
        align: center middle;
    }

    #booking-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #booking-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #booking-actions {
        height: 3;
        align: right middle;
    }
    """

    def __init__(self, provider: Provider) -> None:
        super().__init__()
        self.provider = provider

    def compose(self) -> ComposeResult:
        with Container(id="booking-dialog"):
            yield Static(f"{self.provider.name}の予約", id="booking-title")
            yield Input(placeholder="日付 (YYYY-MM-DD)", id="booking-date")
            yield Input(placeholder="時間 (HH:MM)", id="booking-time")
            with Horizontal(id="booking-actions"):
                yield Button("キャンセル", id="booking-cancel")
                yield Button("予約する", id="booking-confirm", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#booking-date", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "booking-cancel":
            event.stop()
            self.dismiss(None)
        elif event.button.id == "booking-confirm":
            event.stop()
            date = self.query_one("#booking-date", Input).value
            time = self.query_one("#booking-time", Input).value
            self.dismiss((date, time))

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(None)


class ProviderListScreen(Screen[None]):
    """Scrollable list of provider cards."""

    CSS = """
    #provider-list {
        height: 1fr;
        padding: 1;
    }

    ProviderCard {
        height: auto;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    ProviderCard.online {
        border: round $success;
    }

    .card-actions {
        height: auto;
        margin-top: 1;
    }

    .card-actions Button {
        margin-right: 1;
    }
    """

    def __init__(self, providers: list[Provider]) -> None:
        super().__init__()
        self.providers = providers

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="provider-list"):
            for provider in self.providers:
                yield ProviderCard(provider, id=f"provider-{provider.id}")
        yield Footer()


class ChatScreen(Screen[None]):
    """Conversation with one provider, backed by a :class:`ChatSession`.

    Leaving the screen by any route closes the session in ``on_unmount``.
    """

    CSS = """
    #chat-root {
        layout: vertical;
        height: 1fr;
    }

    #chat-title {
        padding: 0 1;
        text-style: bold;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    MessageBubble {
        width: 85%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        background: $primary;
    }

    .message-provider {
        background: $surface;
    }

    InputBox {
        height: auto;
        padding: 0 1;
        border-top: solid $panel;
        background: $surface;
    }

    #message_input {
        width: 1fr;
    }

    #send_button {
        margin-left: 1;
        min-width: 10;
    }

    AttachmentPanel {
        height: auto;
        padding: 0 1;
        border-top: solid $panel;
        background: $surface;
    }

    AttachmentPanel Horizontal {
        height: auto;
    }

    .hidden {
        display: none;
    }

    #chat-actions {
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        session: ChatSession,
        *,
        show_timestamps: bool = True,
        file_dialog: FileDialog | None = None,
        native_dialog_available: Callable[[], bool] | None = None,
    ) -> None:
        super().__init__()
        self.session = session
        self.show_timestamps = show_timestamps
        self._file_dialog = file_dialog or open_native_file_dialog
        self._native_dialog_available = native_dialog_available or has_native_file_dialog
        self._detached = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="chat-root"):
            yield Static(f"{self.session.provider.name}との相談", id="chat-title")
            yield ConversationView(id="conversation")
            yield AttachmentPanel(id="attachment_panel", classes="hidden")
            yield InputBox(id="input_box")
            with Horizontal(id="chat-actions"):
                yield Button("画像を送信", id="open_attach_button")
                yield Button("戻る", id="back_button")
        yield Footer()

    def on_mount(self) -> None:
        session = self.session
        for message in session.timeline.snapshot():
            self._render_message(message)
        session.timeline.on_append(self._on_message_appended)
        session.on_notice(self._on_notice)
        session.on_mode_change(self._on_mode_change)
        session.camera.on_preview(self._on_preview)
        self._refresh_controls()
        self.query_one("#message_input", Input).focus()

    async def on_unmount(self) -> None:
        self._detached = True
        await self.session.close()

    # -- session callbacks -------------------------------------------------

    def _render_message(self, message: Message) -> None:
        self.query_one(ConversationView).add_message(
            message,
            provider_name=self.session.provider.name,
            show_timestamp=self.show_timestamps,
        )

    def _on_message_appended(self, index: int, message: Message) -> None:  # noqa: ARG002
        if self._detached:
            return
        self._render_message(message)

    def _on_notice(self, text: str, exc: SelectyError) -> None:  # noqa: ARG002
        if self._detached:
            return
        self.notify(text, severity="warning")

    def _on_mode_change(self, mode: InputMode) -> None:
        if self._detached:
            return
        attachment = mode is InputMode.ATTACHMENT
        self.query_one(AttachmentPanel).set_class(not attachment, "hidden")
        self.query_one(InputBox).set_class(attachment, "hidden")
        self.query_one("#open_attach_button", Button).disabled = attachment
        self._refresh_controls()

    def _on_preview(self, stream: VideoStream | None) -> None:
        if self._detached:
            return
        self.query_one(AttachmentPanel).set_camera_live(stream is not None)

    def _refresh_controls(self) -> None:
        if self._detached or self.session.closed:
            return
        self.query_one(InputBox).set_can_send(self.session.can_send)
        self.query_one(AttachmentPanel).set_staged(self.session.staged_image)

    # -- input events ------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "message_input" or self.session.closed:
            return
        self.session.set_draft(event.value)
        self._refresh_controls()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "message_input":
            return
        event.stop()
        self.action_send_message()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        handlers: dict[str, Callable[[], None]] = {
            "send_button": self.action_send_message,
            "open_attach_button": self.action_toggle_attachments,
            "back_button": self.action_go_back,
            "camera_button": self._start_camera,
            "pick_button": self._pick_image,
            "capture_button": self._capture,
            "discard_button": self._discard,
            "done_button": self.action_toggle_attachments,
        }
        handler = handlers.get(event.button.id or "")
        if handler is None:
            return
        event.stop()
        handler()

    # -- actions -----------------------------------------------------------

    def action_send_message(self) -> None:
        if self.session.closed:
            return
        if self.session.send() is not None:
            self.query_one(InputBox).clear()
        self._refresh_controls()

    def action_toggle_attachments(self) -> None:
        if self.session.closed:
            return
        if self.session.mode is InputMode.ATTACHMENT:
            self.session.finish_attachments()
        else:
            self.session.open_attachments()

    def action_go_back(self) -> None:
        # The app action also releases the service session and resets the subtitle.
        self.app.call_later(self.app.run_action, "go_back")

    def _start_camera(self) -> None:
        self.run_worker(self._start_camera_worker(), group="camera", exclusive=True)

    async def _start_camera_worker(self) -> None:
        await self.session.start_camera()
        self._refresh_controls()

    def _capture(self) -> None:
        self.session.capture_frame()
        self._refresh_controls()

    def _discard(self) -> None:
        self.session.discard_staged_image()
        self._refresh_controls()

    def _pick_image(self) -> None:
        if not self._native_dialog_available():
            self.app.push_screen(ImagePathScreen(), callback=self._on_image_path_chosen)
            return
        self.run_worker(self._pick_with_native_dialog(), group="import")

    async def _pick_with_native_dialog(self) -> None:
        path = await self._file_dialog(title="画像を選択", file_filter=IMAGE_FILTER)
        if path:
            await self._import(path)

    def _on_image_path_chosen(self, path: str | None) -> None:
        if path:
            self.run_worker(self._import(path), group="import")

    async def _import(self, path: str) -> None:
        if self.session.closed:
            return
        await self.session.import_file(path)
        self._refresh_controls()
