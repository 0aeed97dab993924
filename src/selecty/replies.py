"""Delayed placeholder replies standing in for a provider-side transport."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .config import DEFAULT_REPLY_TEXT
from .timeline import MessageTimeline

LOGGER = logging.getLogger(__name__)


class ReplySimulator:
    """Schedule one cancellable provider reply per user message.

    Each reply is a tracked asyncio task. Completed tasks drop out of
    tracking on their own; ``cancel_all`` cancels and awaits the rest.
    """

    def __init__(
        self,
        reply_text: str = DEFAULT_REPLY_TEXT,
        default_delay: float = 1.0,
    ) -> None:
        self.reply_text = reply_text
        self.default_delay = max(0.0, default_delay)
        self._pending: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        """Return the number of replies that have not fired yet."""
        return sum(1 for task in self._pending if not task.done())

    def schedule_reply(
        self, timeline: MessageTimeline, delay: float | None = None
    ) -> asyncio.Task[Any]:
        """Append the placeholder reply to ``timeline`` after ``delay`` seconds."""
        wait = self.default_delay if delay is None else max(0.0, delay)
        task = asyncio.create_task(self._deliver(timeline, wait))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        task.add_done_callback(self._log_failure)
        LOGGER.debug(
            "reply.scheduled",
            extra={"event": "reply.scheduled", "delay": wait, "pending": len(self._pending)},
        )
        return task

    async def _deliver(self, timeline: MessageTimeline, delay: float) -> None:
        await asyncio.sleep(delay)
        timeline.append_provider_message(self.reply_text)
        LOGGER.info("reply.delivered", extra={"event": "reply.delivered"})

    def _log_failure(self, task: asyncio.Task[Any]) -> None:
        """Log reply failures so they are not silently lost."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning(
                "reply.failed",
                extra={
                    "event": "reply.failed",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )

    async def cancel_all(self) -> int:
        """Cancel every outstanding reply, await them, and return how many were cancelled."""
        outstanding = [task for task in self._pending if not task.done()]
        for task in outstanding:
            task.cancel()
        # gather still propagates a cancellation aimed at the caller.
        await asyncio.gather(*outstanding, return_exceptions=True)
        self._pending.clear()
        if outstanding:
            LOGGER.info(
                "reply.cancelled",
                extra={"event": "reply.cancelled", "count": len(outstanding)},
            )
        return len(outstanding)
