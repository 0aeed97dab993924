"""Top-level owner of the provider directory and the active chat session."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from .booking import BookingDesk
from .camera import CameraDevice
from .config import DEFAULT_CONFIG
from .models import BookingRequest, Provider
from .providers import ProviderDirectory
from .session import ChatSession

LOGGER = logging.getLogger(__name__)


class ConsultationService:
    """Browse providers, hold at most one chat session, and request bookings.

    Selecting a provider always closes the previous session first, so no
    camera or reply timer outlives the conversation that created it.
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        directory: ProviderDirectory | None = None,
        booking: BookingDesk | None = None,
        camera_factory: Callable[[], CameraDevice] | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.directory = directory or ProviderDirectory.from_config(self.config)
        self.booking = booking or BookingDesk()
        self._camera_factory = camera_factory
        self._session: ChatSession | None = None

    @property
    def providers(self) -> list[Provider]:
        return list(self.directory)

    @property
    def active_session(self) -> ChatSession | None:
        return self._session

    def _resolve(self, provider: Provider | int) -> Provider:
        if isinstance(provider, Provider):
            return provider
        found = self.directory.get(provider)
        if found is None:
            raise KeyError(f"Unknown provider id {provider}")
        return found

    async def select_provider(self, provider: Provider | int) -> ChatSession:
        """Close any active session and start a new one with ``provider``."""
        target = self._resolve(provider)
        await self.back()
        device = self._camera_factory() if self._camera_factory is not None else None
        self._session = ChatSession.from_config(target, self.config, camera_device=device)
        LOGGER.info(
            "service.session_started",
            extra={"event": "service.session_started", "provider_id": target.id},
        )
        return self._session

    async def back(self) -> None:
        """Return to the provider list, tearing down the active session."""
        session, self._session = self._session, None
        if session is not None:
            await session.close()

    def request_booking(self, provider: Provider | int, date: str, time: str) -> BookingRequest:
        return self.booking.request(self._resolve(provider), date, time)

    async def close(self) -> None:
        await self.back()
