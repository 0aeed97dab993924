"""Camera stream lifecycle and still-frame capture.

``MediaCaptureController`` only knows the ``CameraDevice``/``VideoStream``
contract. The shipped backend runs ``ffmpeg`` as a subprocess that writes
raw RGB frames to stdout; a reader task keeps the newest frame so captures
are synchronous.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
import shutil
from typing import Any, Protocol

from PIL import Image

from .exceptions import (
    CaptureAlreadyActiveError,
    CaptureUnavailableError,
    NoActiveStreamError,
)
from .imaging import draw_on_canvas, encode_jpeg
from .models import ImageRef

LOGGER = logging.getLogger(__name__)


class VideoStream(Protocol):
    """A live, exclusively held video capture stream."""

    @property
    def active(self) -> bool: ...

    def read_frame(self) -> Image.Image: ...

    def stop(self) -> None: ...


class CameraDevice(Protocol):
    """Factory for live video streams."""

    async def open(self) -> VideoStream: ...


PreviewCallback = Callable[["VideoStream | None"], None]


class NullCameraDevice:
    """Backend used when no camera is configured; every open fails."""

    def __init__(self, reason: str = "No camera backend is configured.") -> None:
        self.reason = reason

    async def open(self) -> VideoStream:
        raise CaptureUnavailableError(self.reason)


class FFmpegVideoStream:
    """Raw RGB frames read from a running ffmpeg process."""

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        size: tuple[int, int],
    ) -> None:
        self._process = process
        self._size = size
        self._frame_bytes = size[0] * size[1] * 3
        self._latest: bytes | None = None
        self._first_frame = asyncio.Event()
        self._stopped = False
        self._reader = asyncio.create_task(self._read_frames())
        self._reaper: asyncio.Task[Any] | None = None

    @property
    def active(self) -> bool:
        return (
            not self._stopped
            and self._process.returncode is None
            and not self._reader.done()
        )

    async def wait_first_frame(self, timeout: float) -> None:
        """Wait until one frame arrived, the process died, or ``timeout`` passed."""
        first = asyncio.ensure_future(self._first_frame.wait())
        try:
            await asyncio.wait(
                {first, self._reader}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            first.cancel()
        if self._latest is None:
            detail = await self._error_output()
            self.stop()
            raise CaptureUnavailableError(
                f"Camera produced no frames{': ' + detail if detail else ''}"
            )

    async def _read_frames(self) -> None:
        stdout = self._process.stdout
        if stdout is None:
            return
        while True:
            try:
                chunk = await stdout.readexactly(self._frame_bytes)
            except asyncio.IncompleteReadError:
                return
            self._latest = chunk
            self._first_frame.set()

    async def _error_output(self) -> str:
        stderr = self._process.stderr
        if stderr is None or self._process.returncode is None:
            return ""
        try:
            data = await asyncio.wait_for(stderr.read(4096), timeout=0.5)
        except (asyncio.TimeoutError, OSError):
            return ""
        return data.decode("utf-8", errors="replace").strip()

    def read_frame(self) -> Image.Image:
        if self._latest is None or not self.active:
            raise NoActiveStreamError("Camera stream has no frame available.")
        return Image.frombytes("RGB", self._size, self._latest)

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._reader.cancel()
        if self._process.returncode is None:
            try:
                self._process.terminate()
            except ProcessLookupError:
                pass
            self._reaper = asyncio.ensure_future(self._process.wait())
        self._latest = None


class FFmpegCameraDevice:
    """Open a capture device through ``ffmpeg`` (v4l2 by default)."""

    def __init__(
        self,
        device: str = "/dev/video0",
        *,
        input_format: str = "v4l2",
        ffmpeg_path: str = "ffmpeg",
        size: tuple[int, int] = (640, 480),
        start_timeout: float = 5.0,
    ) -> None:
        self.device = device
        self.input_format = input_format
        self.ffmpeg_path = ffmpeg_path
        self.size = size
        self.start_timeout = start_timeout

    def command(self, binary: str) -> list[str]:
        width, height = self.size
        return [
            binary,
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            self.input_format,
            "-i",
            self.device,
            "-vf",
            f"scale={width}:{height}",
            "-f",
            "rawvideo",
            "-pix_fmt",
            "rgb24",
            "-",
        ]

    async def open(self) -> VideoStream:
        binary = shutil.which(self.ffmpeg_path)
        if binary is None:
            raise CaptureUnavailableError(f"{self.ffmpeg_path} is not installed.")
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command(binary),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise CaptureUnavailableError(f"Unable to start camera: {exc}") from exc

        stream = FFmpegVideoStream(process, self.size)
        try:
            await stream.wait_first_frame(self.start_timeout)
        except BaseException:
            stream.stop()
            raise
        return stream


def build_camera_device(camera_config: dict[str, Any]) -> CameraDevice:
    """Build the configured camera backend."""
    backend = str(camera_config.get("backend", "ffmpeg")).lower()
    if backend == "none":
        return NullCameraDevice()
    return FFmpegCameraDevice(
        device=str(camera_config.get("device", "/dev/video0")),
        input_format=str(camera_config.get("input_format", "v4l2")),
        ffmpeg_path=str(camera_config.get("ffmpeg_path", "ffmpeg")),
        size=(
            int(camera_config.get("source_width", 640)),
            int(camera_config.get("source_height", 480)),
        ),
        start_timeout=float(camera_config.get("start_timeout_seconds", 5.0)),
    )


class MediaCaptureController:
    """Own at most one live camera stream and turn frames into still images."""

    def __init__(
        self,
        device: CameraDevice,
        *,
        surface_size: tuple[int, int] = (640, 480),
        jpeg_quality: int = 85,
    ) -> None:
        self._device = device
        self.surface_size = surface_size
        self.jpeg_quality = jpeg_quality
        self._stream: VideoStream | None = None
        self._starting = False
        self._generation = 0
        self._on_preview: PreviewCallback | None = None

    @property
    def is_active(self) -> bool:
        """Return True while a stream is bound to the preview surface."""
        return self._stream is not None

    @property
    def is_starting(self) -> bool:
        return self._starting

    def on_preview(self, callback: PreviewCallback) -> None:
        """Register the display surface; called with the stream or ``None`` on unbind."""
        self._on_preview = callback

    async def start_camera(self) -> None:
        """Open the camera and bind its stream to the preview surface.

        Raises:
            CaptureAlreadyActiveError: When a stream is bound or still opening.
            CaptureUnavailableError: When the device cannot be opened.
        """
        if self._stream is not None or self._starting:
            raise CaptureAlreadyActiveError("A camera stream is already open.")

        self._starting = True
        generation = self._generation
        try:
            stream = await self._device.open()
        except CaptureUnavailableError as exc:
            LOGGER.warning(
                "camera.unavailable",
                extra={"event": "camera.unavailable", "reason": str(exc)},
            )
            raise
        finally:
            self._starting = False

        if generation != self._generation:
            # stop_camera() ran while the device was opening.
            stream.stop()
            raise CaptureUnavailableError("Camera start was abandoned.")

        self._stream = stream
        if self._on_preview is not None:
            self._on_preview(stream)
        LOGGER.info("camera.started", extra={"event": "camera.started"})

    def capture_frame(self) -> ImageRef:
        """Encode the current frame as a still image and stop the camera.

        Raises:
            NoActiveStreamError: When no live stream is bound.
        """
        stream = self._stream
        if stream is None:
            raise NoActiveStreamError("Start the camera before capturing.")
        if not stream.active:
            self.stop_camera()
            raise NoActiveStreamError("The camera stream has ended.")

        frame = stream.read_frame()
        image = encode_jpeg(
            draw_on_canvas(frame, self.surface_size),
            quality=self.jpeg_quality,
            origin="camera",
        )
        self.stop_camera()
        LOGGER.info(
            "camera.captured",
            extra={"event": "camera.captured", "size": image.size_label},
        )
        return image

    def stop_camera(self) -> None:
        """Release the bound stream, if any. Safe to call repeatedly."""
        self._generation += 1
        stream = self._stream
        if stream is None:
            return
        self._stream = None
        stream.stop()
        if self._on_preview is not None:
            self._on_preview(None)
        LOGGER.info("camera.stopped", extra={"event": "camera.stopped"})
