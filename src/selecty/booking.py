"""Booking requests handed off to the (external) booking subsystem."""

from __future__ import annotations

from collections.abc import Callable
import logging

from .models import BookingRequest, Provider

LOGGER = logging.getLogger(__name__)


class BookingDesk:
    """Turn a provider/date/time choice into a booking request.

    Values are passed through as entered; checking them belongs to the
    booking subsystem.
    """

    def __init__(self) -> None:
        self.requests: list[BookingRequest] = []
        self._subscribers: list[Callable[[BookingRequest], None]] = []

    def subscribe(self, handler: Callable[[BookingRequest], None]) -> None:
        self._subscribers.append(handler)

    def request(self, provider: Provider, date: str, time: str) -> BookingRequest:
        booking = BookingRequest(provider=provider, date=date.strip(), time=time.strip())
        self.requests.append(booking)
        LOGGER.info(
            "booking.requested",
            extra={
                "event": "booking.requested",
                "provider_id": provider.id,
                "date": booking.date,
                "time": booking.time,
            },
        )
        for handler in list(self._subscribers):
            handler(booking)
        return booking
