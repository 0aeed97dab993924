"""Pillow helpers that turn frames and files into ``ImageRef`` values.

Both camera captures and imported files end up as base64 ``data:`` URIs,
so messages never need to know where an image came from.
"""

from __future__ import annotations

import base64
import binascii
import io
import warnings

from PIL import Image, UnidentifiedImageError

from .models import ImageRef

# Image file extensions accepted for imports
IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tiff", ".tif"}
)

_PASSTHROUGH_FORMATS = {"JPEG": "image/jpeg", "PNG": "image/png"}

# Upper bound on decoded pixels for imported files
DEFAULT_MAX_PIXELS = 40_000_000


def _data_uri(mime_type: str, payload: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def draw_on_canvas(frame: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Draw ``frame`` onto a fresh RGB canvas of exactly ``size`` pixels."""
    canvas = Image.new("RGB", size, (0, 0, 0))
    source = frame if frame.mode == "RGB" else frame.convert("RGB")
    if source.size != size:
        source = source.resize(size, Image.Resampling.BILINEAR)
    canvas.paste(source, (0, 0))
    return canvas


def encode_jpeg(image: Image.Image, *, quality: int = 85, origin: str = "camera") -> ImageRef:
    """Encode a Pillow image as a JPEG ``ImageRef``."""
    rgb = image if image.mode == "RGB" else image.convert("RGB")
    buffer = io.BytesIO()
    rgb.save(buffer, format="JPEG", quality=quality)
    return ImageRef(
        data_uri=_data_uri("image/jpeg", buffer.getvalue()),
        mime_type="image/jpeg",
        width=rgb.width,
        height=rgb.height,
        origin=origin,
    )


def decode_image_bytes(
    raw: bytes, *, quality: int = 85, max_pixels: int = DEFAULT_MAX_PIXELS
) -> ImageRef:
    """Decode file bytes into an ``ImageRef``.

    JPEG and PNG payloads are kept byte-for-byte; every other format is
    re-encoded as JPEG so the reference stays displayable everywhere.
    Images with more than ``max_pixels`` pixels are rejected before their
    pixel data is loaded.

    Raises:
        ValueError: If the bytes are empty, too large, or not a decodable image.
    """
    if not raw:
        raise ValueError("File is empty")
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(raw)) as probe:
                width, height = probe.size
                if width * height > max_pixels:
                    raise ValueError(
                        f"Image dimensions too large ({width}x{height}, max {max_pixels} pixels)"
                    )
                probe.verify()
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        Image.DecompressionBombWarning,
        OSError,
        SyntaxError,
    ) as exc:
        raise ValueError(f"Not a decodable image: {exc}") from exc

    mime_type = _PASSTHROUGH_FORMATS.get(image.format or "")
    if mime_type is not None:
        return ImageRef(
            data_uri=_data_uri(mime_type, raw),
            mime_type=mime_type,
            width=image.width,
            height=image.height,
            origin="file",
        )
    return encode_jpeg(image, quality=quality, origin="file")


def decode_data_uri(image: ImageRef) -> bytes:
    """Return the raw encoded bytes carried by an ``ImageRef``."""
    _, _, payload = image.data_uri.partition(",")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("Invalid base64 payload in image reference") from exc
