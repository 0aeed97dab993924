"""Tests for provider selection, back navigation, and bookings."""

from __future__ import annotations

from copy import deepcopy
import unittest

from fakes import FakeCameraDevice

from selecty.booking import BookingDesk
from selecty.config import DEFAULT_CONFIG
from selecty.models import BookingRequest
from selecty.providers import ProviderDirectory
from selecty.service import ConsultationService


class ProviderDirectoryTests(unittest.TestCase):
    def test_default_directory_lists_configured_stylists(self) -> None:
        directory = ProviderDirectory.from_config(DEFAULT_CONFIG)
        self.assertEqual([p.name for p in directory], ["山田花子", "鈴木一郎"])
        self.assertEqual(len(directory), 2)
        self.assertEqual(directory.get(2).specialty, "メンズ")
        self.assertIsNone(directory.get(99))
        self.assertEqual([p.id for p in directory.online()], [1])
        self.assertEqual(directory.get(1).status_label, "オンライン")


class BookingDeskTests(unittest.TestCase):
    def test_request_is_recorded_and_published(self) -> None:
        desk = BookingDesk()
        seen: list[BookingRequest] = []
        desk.subscribe(seen.append)
        provider = ProviderDirectory.from_config(DEFAULT_CONFIG).get(1)

        booking = desk.request(provider, " 2026-11-01 ", "10:30 ")

        self.assertEqual((booking.date, booking.time), ("2026-11-01", "10:30"))
        self.assertEqual(desk.requests, [booking])
        self.assertEqual(seen, [booking])


class ConsultationServiceTests(unittest.IsolatedAsyncioTestCase):
    """Validate that only one session is alive at a time."""

    async def asyncSetUp(self) -> None:
        config = deepcopy(DEFAULT_CONFIG)
        config["chat"]["reply_delay_seconds"] = 5.0
        self.devices: list[FakeCameraDevice] = []

        def _factory() -> FakeCameraDevice:
            device = FakeCameraDevice()
            self.devices.append(device)
            return device

        self.service = ConsultationService(config, camera_factory=_factory)

    async def asyncTearDown(self) -> None:
        await self.service.close()

    async def test_select_by_id_starts_empty_session(self) -> None:
        session = await self.service.select_provider(1)
        self.assertIs(self.service.active_session, session)
        self.assertEqual(session.provider.name, "山田花子")
        self.assertEqual(len(session.timeline), 0)

    async def test_unknown_provider_rejected(self) -> None:
        with self.assertRaises(KeyError):
            await self.service.select_provider(42)

    async def test_switching_provider_tears_down_previous(self) -> None:
        first = await self.service.select_provider(1)
        await first.start_camera()
        first.set_draft("hello")
        first.send()

        second = await self.service.select_provider(2)

        self.assertTrue(first.closed)
        self.assertEqual(first.replies.pending, 0)
        self.assertEqual(self.devices[0].open_streams, [])
        self.assertFalse(second.closed)
        self.assertEqual(len(second.timeline), 0)

    async def test_back_discards_session(self) -> None:
        session = await self.service.select_provider(1)
        await self.service.back()
        self.assertIsNone(self.service.active_session)
        self.assertTrue(session.timeline.discarded)
        await self.service.back()

    async def test_request_booking_by_id(self) -> None:
        booking = self.service.request_booking(2, "2026-11-02", "15:00")
        self.assertEqual(booking.provider.name, "鈴木一郎")
        self.assertEqual(self.service.booking.requests, [booking])


if __name__ == "__main__":
    unittest.main()
