"""Attachment mode panel: camera controls, file import, staged preview."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Static

from ..models import ImageRef


class AttachmentPanel(Vertical):
    """Buttons for the attach-image flow plus live/staged status lines.

    Button presses bubble up to the chat screen, which owns the session.
    """

    def compose(self) -> ComposeResult:
        with Horizontal(id="attach_sources"):
            yield Button("カメラを起動", id="camera_button")
            yield Button("画像を選択", id="pick_button")
        yield Static("Camera off", id="camera_status")
        with Horizontal(id="staged_row"):
            yield Static("No image staged", id="staged_status")
            yield Button("✕", id="discard_button", disabled=True)
        with Horizontal(id="attach_actions"):
            yield Button("撮影", id="capture_button", disabled=True)
            yield Button("完了", id="done_button", variant="primary")

    def set_camera_live(self, live: bool) -> None:
        self.query_one("#camera_status", Static).update(
            "● Camera live" if live else "Camera off"
        )
        self.query_one("#capture_button", Button).disabled = not live
        self.query_one("#camera_button", Button).disabled = live

    def set_staged(self, image: ImageRef | None) -> None:
        label = (
            f"Staged: {image.mime_type} {image.size_label} ({image.origin})"
            if image is not None
            else "No image staged"
        )
        self.query_one("#staged_status", Static).update(label)
        self.query_one("#discard_button", Button).disabled = image is None
