"""Immutable value types shared by the chat core and the front-end."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Sender(str, Enum):
    """Author of a timeline message."""

    USER = "user"
    PROVIDER = "provider"


class InputMode(str, Enum):
    """Mutually exclusive input modes of a chat session."""

    TEXT = "TEXT"
    ATTACHMENT = "ATTACHMENT"


@dataclass(frozen=True)
class ImageRef:
    """Opaque still-image reference carried by staged images and messages.

    ``data_uri`` is a ``data:<mime>;base64,...`` string, so the same value
    works for camera captures and imported files.
    """

    data_uri: str
    mime_type: str
    width: int
    height: int
    origin: str = "file"

    @property
    def size_label(self) -> str:
        """Return a compact ``WxH`` label."""
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class Message:
    """A single chat message. Never mutated after creation."""

    text: str
    sender: Sender
    image: ImageRef | None = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def has_image(self) -> bool:
        return self.image is not None


@dataclass(frozen=True)
class Provider:
    """A selectable stylist supplied by the provider directory."""

    id: int
    name: str
    is_online: bool = False
    photo_url: str = ""
    introduction: str = ""
    specialty: str = ""
    rating: float = 0.0

    @property
    def status_label(self) -> str:
        return "オンライン" if self.is_online else "オフライン"

    @classmethod
    def from_config(cls, entry: dict[str, Any]) -> Provider:
        """Build a provider from a validated ``[[providers]]`` entry."""
        return cls(
            id=int(entry["id"]),
            name=str(entry["name"]),
            is_online=bool(entry.get("is_online", False)),
            photo_url=str(entry.get("photo_url", "")),
            introduction=str(entry.get("introduction", "")),
            specialty=str(entry.get("specialty", "")),
            rating=float(entry.get("rating", 0.0)),
        )


@dataclass(frozen=True)
class BookingRequest:
    """A booking request emitted for a provider."""

    provider: Provider
    date: str
    time: str
    requested_at: datetime = field(default_factory=_utcnow)
