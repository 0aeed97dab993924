"""Per-provider chat session coordinating timeline, attachments and replies."""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
from types import TracebackType
from typing import Any

from .camera import CameraDevice, MediaCaptureController, build_camera_device
from .config import DEFAULT_CONFIG, DEFAULT_REPLY_TEXT
from .exceptions import (
    CaptureAlreadyActiveError,
    CaptureUnavailableError,
    EmptyMessageError,
    NoActiveStreamError,
    SelectyError,
    SessionClosedError,
    UnreadableFileError,
)
from .imaging import DEFAULT_MAX_PIXELS
from .models import ImageRef, InputMode, Message, Provider
from .replies import ReplySimulator
from .staging import AttachmentStagingArea
from .timeline import MessageTimeline

LOGGER = logging.getLogger(__name__)

NoticeCallback = Callable[[str, SelectyError], None]

_NOTICE_TEXT: dict[type, str] = {
    CaptureUnavailableError: "カメラを起動できませんでした: {exc}",
    CaptureAlreadyActiveError: "カメラは既に起動しています。",
    NoActiveStreamError: "先にカメラを起動してください。",
    UnreadableFileError: "画像を読み込めませんでした: {exc}",
    EmptyMessageError: "メッセージまたは画像を入力してください。",
}


class ChatSession:
    """One consultation with one provider.

    The session has two input modes. ``TEXT`` is the default; ``ATTACHMENT``
    exposes the camera and file-import actions. A staged image survives mode
    changes until it is sent or discarded. Recoverable errors never escape
    the user-facing actions: they are reported through :meth:`on_notice`.
    """

    def __init__(
        self,
        provider: Provider,
        *,
        camera: MediaCaptureController,
        staging: AttachmentStagingArea | None = None,
        timeline: MessageTimeline | None = None,
        replies: ReplySimulator | None = None,
    ) -> None:
        self.provider = provider
        self.camera = camera
        self.staging = staging or AttachmentStagingArea()
        self.timeline = timeline or MessageTimeline()
        self.replies = replies or ReplySimulator()
        self.staging.release_hook = self.camera.stop_camera
        self._mode = InputMode.TEXT
        self._draft = ""
        self._closed = False
        self.notices: list[str] = []
        self._notice_listeners: list[NoticeCallback] = []
        self._mode_listeners: list[Callable[[InputMode], None]] = []

    @classmethod
    def from_config(
        cls,
        provider: Provider,
        config: dict[str, Any] | None = None,
        *,
        camera_device: CameraDevice | None = None,
    ) -> ChatSession:
        """Build a session with collaborators configured from app config."""
        cfg = config or DEFAULT_CONFIG
        camera_cfg = cfg.get("camera", {})
        attachments_cfg = cfg.get("attachments", {})
        chat_cfg = cfg.get("chat", {})
        camera = MediaCaptureController(
            camera_device or build_camera_device(camera_cfg),
            surface_size=(int(camera_cfg.get("width", 640)), int(camera_cfg.get("height", 480))),
            jpeg_quality=int(camera_cfg.get("jpeg_quality", 85)),
        )
        staging = AttachmentStagingArea(
            max_image_bytes=int(attachments_cfg.get("max_image_bytes", 10 * 1024 * 1024)),
            max_image_pixels=int(attachments_cfg.get("max_image_pixels", DEFAULT_MAX_PIXELS)),
            jpeg_quality=int(attachments_cfg.get("jpeg_quality", 85)),
        )
        replies = ReplySimulator(
            reply_text=str(chat_cfg.get("reply_text", DEFAULT_REPLY_TEXT)),
            default_delay=float(chat_cfg.get("reply_delay_seconds", 1.0)),
        )
        return cls(provider, camera=camera, staging=staging, replies=replies)

    # -- read-only state -------------------------------------------------

    @property
    def mode(self) -> InputMode:
        return self._mode

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def staged_image(self) -> ImageRef | None:
        return self.staging.peek()

    @property
    def can_send(self) -> bool:
        """Return False when the send control should be disabled."""
        return not self._closed and (bool(self._draft.strip()) or self.staging.has_image)

    def on_notice(self, callback: NoticeCallback) -> None:
        """Register a callback for non-blocking user notices."""
        self._notice_listeners.append(callback)

    def on_mode_change(self, callback: Callable[[InputMode], None]) -> None:
        self._mode_listeners.append(callback)

    # -- mode transitions ------------------------------------------------

    def set_draft(self, text: str) -> None:
        self._ensure_open()
        self._draft = text

    def open_attachments(self) -> None:
        """Switch to attachment mode."""
        self._ensure_open()
        self._set_mode(InputMode.ATTACHMENT)

    def finish_attachments(self) -> None:
        """Return to text mode, stopping the camera; the staged image is kept."""
        self._ensure_open()
        self.camera.stop_camera()
        self._set_mode(InputMode.TEXT)

    def _set_mode(self, mode: InputMode) -> None:
        if mode is self._mode:
            return
        self._mode = mode
        LOGGER.debug("session.mode", extra={"event": "session.mode", "mode": mode.value})
        for listener in list(self._mode_listeners):
            listener(mode)

    # -- attachment actions ----------------------------------------------

    async def start_camera(self) -> bool:
        """Start the camera preview; returns False and posts a notice on failure."""
        self._ensure_open()
        try:
            await self.camera.start_camera()
        except (CaptureUnavailableError, CaptureAlreadyActiveError) as exc:
            self._notify(exc)
            return False
        if self._closed:
            self.camera.stop_camera()
            return False
        return True

    def capture_frame(self) -> ImageRef | None:
        """Capture a still, stage it, and stop the camera."""
        self._ensure_open()
        try:
            image = self.camera.capture_frame()
        except NoActiveStreamError as exc:
            self._notify(exc)
            return None
        self.staging.set_from_capture(image)
        return image

    async def import_file(self, path: str | Path) -> ImageRef | None:
        """Stage an image file; the previous image stays staged on failure."""
        self._ensure_open()
        try:
            image = await self.staging.set_from_file(path)
        except UnreadableFileError as exc:
            self._notify(exc)
            return None
        if self._closed:
            self.staging.clear()
            return None
        return image

    def discard_staged_image(self) -> None:
        self._ensure_open()
        self.staging.clear()

    # -- sending ---------------------------------------------------------

    def send(self) -> Message | None:
        """Send the draft and staged image, then arm a provider reply.

        Returns the appended message, or ``None`` when there was nothing to send.
        """
        self._ensure_open()
        try:
            index = self.timeline.append_user_message(self._draft, self.staging.peek())
        except EmptyMessageError as exc:
            self._notify(exc)
            return None
        self.staging.clear()
        self._draft = ""
        self.replies.schedule_reply(self.timeline)
        message = self.timeline.view()[index]
        LOGGER.info(
            "session.sent",
            extra={
                "event": "session.sent",
                "provider_id": self.provider.id,
                "has_image": message.has_image,
            },
        )
        return message

    # -- teardown --------------------------------------------------------

    async def close(self) -> None:
        """Stop the camera, cancel pending replies, and discard all state."""
        if self._closed:
            return
        self._closed = True
        try:
            self.camera.stop_camera()
        finally:
            try:
                cancelled = await self.replies.cancel_all()
            finally:
                self.staging.clear()
                self.timeline.discard()
                self._draft = ""
            LOGGER.info(
                "session.closed",
                extra={
                    "event": "session.closed",
                    "provider_id": self.provider.id,
                    "cancelled_replies": cancelled,
                },
            )

    async def __aenter__(self) -> ChatSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError(f"Session with {self.provider.name} is closed.")

    def _notify(self, exc: SelectyError) -> None:
        template = _NOTICE_TEXT.get(type(exc), "{exc}")
        text = template.format(exc=exc)
        self.notices.append(text)
        LOGGER.info(
            "session.notice",
            extra={"event": "session.notice", "error_type": type(exc).__name__},
        )
        for listener in list(self._notice_listeners):
            listener(text, exc)
