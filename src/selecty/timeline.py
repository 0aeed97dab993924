"""Append-only message timeline for a single consultation."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
import logging
from typing import overload

from .exceptions import EmptyMessageError, SessionClosedError
from .models import ImageRef, Message, Sender

LOGGER = logging.getLogger(__name__)

AppendListener = Callable[[int, Message], None]


class TimelineSnapshot(Sequence[Message]):
    """Frozen ordered view of the timeline at the moment it was taken."""

    __slots__ = ("_messages",)

    def __init__(self, messages: Sequence[Message]) -> None:
        self._messages: tuple[Message, ...] = tuple(messages)

    @overload
    def __getitem__(self, index: int) -> Message: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Message, ...]: ...

    def __getitem__(self, index: int | slice) -> Message | tuple[Message, ...]:
        return self._messages[index]

    def __len__(self) -> int:
        return len(self._messages)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TimelineSnapshot):
            return self._messages == other._messages
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._messages)

    def __repr__(self) -> str:
        return f"TimelineSnapshot({len(self._messages)} messages)"


class TimelineView(Sequence[Message]):
    """Live read-only view; each iteration reflects the current tail."""

    __slots__ = ("_timeline",)

    def __init__(self, timeline: MessageTimeline) -> None:
        self._timeline = timeline

    def __getitem__(self, index):  # type: ignore[override]
        return self._timeline._messages[index]

    def __len__(self) -> int:
        return len(self._timeline._messages)

    def __iter__(self) -> Iterator[Message]:
        # Index-based so appends made while iterating are picked up.
        index = 0
        while index < len(self._timeline._messages):
            yield self._timeline._messages[index]
            index += 1


class MessageTimeline:
    """Ordered, append-only log of chat messages.

    The timeline only records messages; arming provider replies is the
    caller's job.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._listeners: list[AppendListener] = []
        self._discarded = False

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def discarded(self) -> bool:
        return self._discarded

    def on_append(self, callback: AppendListener) -> None:
        """Register a callback invoked with ``(index, message)`` after each append."""
        self._listeners.append(callback)

    def append_user_message(self, text: str, image: ImageRef | None = None) -> int:
        """Append a user message and return its index.

        Raises:
            EmptyMessageError: When ``text`` is blank and no image is given.
        """
        if not text.strip() and image is None:
            raise EmptyMessageError("A message needs text or an image.")
        return self._append(Message(text=text, sender=Sender.USER, image=image))

    def append_provider_message(self, text: str) -> int:
        """Append a provider message and return its index."""
        return self._append(Message(text=text, sender=Sender.PROVIDER))

    def snapshot(self) -> TimelineSnapshot:
        """Return a frozen copy of all messages so far."""
        return TimelineSnapshot(self._messages)

    def view(self) -> TimelineView:
        """Return a live, read-only sequence over the timeline."""
        return TimelineView(self)

    def discard(self) -> None:
        """Drop all messages and refuse further appends."""
        self._discarded = True
        self._messages.clear()
        self._listeners.clear()

    def _append(self, message: Message) -> int:
        if self._discarded:
            raise SessionClosedError("Timeline has been discarded.")
        self._messages.append(message)
        index = len(self._messages) - 1
        LOGGER.debug(
            "timeline.appended",
            extra={
                "event": "timeline.appended",
                "index": index,
                "sender": message.sender.value,
                "has_image": message.has_image,
            },
        )
        for listener in list(self._listeners):
            listener(index, message)
        return index
