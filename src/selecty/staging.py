"""Single-slot staging area for the image attached to the next message."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from pathlib import Path

from .exceptions import UnreadableFileError
from .imaging import DEFAULT_MAX_PIXELS, IMAGE_EXTENSIONS, decode_image_bytes
from .models import ImageRef

LOGGER = logging.getLogger(__name__)


def validate_image_path(path: str | Path, *, max_bytes: int) -> Path:
    """Resolve ``path`` and check existence, type, extension and size.

    Raises:
        UnreadableFileError: With a user-facing reason when a check fails.
    """
    try:
        resolved = Path(path).expanduser().resolve()
    except (OSError, RuntimeError) as exc:
        raise UnreadableFileError(f"Invalid path {path}: {exc}") from exc

    if not resolved.exists():
        raise UnreadableFileError(f"Image not found: {path}")
    if not resolved.is_file():
        raise UnreadableFileError(f"Not a file: {path}")
    if resolved.suffix.lower() not in IMAGE_EXTENSIONS:
        exts = ", ".join(sorted(IMAGE_EXTENSIONS))
        raise UnreadableFileError(f"Invalid image type. Allowed: {exts}")
    size = resolved.stat().st_size
    if size > max_bytes:
        max_mb = max_bytes / (1024 * 1024)
        raise UnreadableFileError(f"Image too large (max {max_mb:.1f}MB)")
    return resolved


def _read_and_decode(path: Path, quality: int, max_pixels: int) -> ImageRef:
    return decode_image_bytes(path.read_bytes(), quality=quality, max_pixels=max_pixels)


class AttachmentStagingArea:
    """Hold zero or one image awaiting send.

    Replacing the staged image runs the release hook, which the chat
    session wires to ``MediaCaptureController.stop_camera``.
    """

    def __init__(
        self,
        *,
        max_image_bytes: int = 10 * 1024 * 1024,
        jpeg_quality: int = 85,
        max_image_pixels: int = DEFAULT_MAX_PIXELS,
        release_hook: Callable[[], None] | None = None,
    ) -> None:
        self.max_image_bytes = max_image_bytes
        self.jpeg_quality = jpeg_quality
        self.max_image_pixels = max_image_pixels
        self.release_hook = release_hook
        self._image: ImageRef | None = None

    def peek(self) -> ImageRef | None:
        """Return the staged image without changing state."""
        return self._image

    @property
    def has_image(self) -> bool:
        return self._image is not None

    def set_from_capture(self, image: ImageRef) -> None:
        """Stage a camera capture, replacing any previous image."""
        self._replace(image)

    async def set_from_file(self, path: str | Path) -> ImageRef:
        """Read, decode and stage an image file.

        The slot is left untouched when the file cannot be used.

        Raises:
            UnreadableFileError: When validation, reading or decoding fails.
        """
        resolved = validate_image_path(path, max_bytes=self.max_image_bytes)
        try:
            image = await asyncio.to_thread(
                _read_and_decode, resolved, self.jpeg_quality, self.max_image_pixels
            )
        except (OSError, ValueError) as exc:
            LOGGER.warning(
                "staging.unreadable",
                extra={"event": "staging.unreadable", "path": str(resolved), "error": str(exc)},
            )
            raise UnreadableFileError(f"Unable to read image {resolved.name}: {exc}") from exc
        self._replace(image)
        LOGGER.info(
            "staging.file_staged",
            extra={"event": "staging.file_staged", "path": str(resolved), "size": image.size_label},
        )
        return image

    def clear(self) -> None:
        """Discard the staged image; does nothing when empty."""
        self._image = None

    def take(self) -> ImageRef | None:
        """Return the staged image and clear the slot."""
        image, self._image = self._image, None
        return image

    def _replace(self, image: ImageRef) -> None:
        if self.release_hook is not None:
            self.release_hook()
        self._image = image
