"""Pytest configuration and shared fixtures for the booking service tests."""

import asyncio
import os

# Keep the app from exporting telemetry or reaching a remote store during tests
os.environ["OTEL_ENABLED"] = "false"
os.environ["STORE_BACKEND"] = "memory"

import pytest

from hotel_booking import errors
from hotel_booking.directory import InMemoryRoomDirectory
from hotel_booking.ledger import InMemoryBookingLedger
from hotel_booking.models import Room, RoomCategory
from hotel_booking.wizard import BookingWizard


class FailingLedger(InMemoryBookingLedger):
    """Ledger whose backend rejects every booking until ``fail`` is cleared."""

    def __init__(self):
        super().__init__()
        self.fail = True
        self.attempts = 0

    async def create(self, draft, nightly_price, room_name=None):
        self.attempts += 1
        if self.fail:
            raise errors.RemoteFailure("Failed to create booking", status_code=500)
        return await super().create(draft, nightly_price, room_name)


class BlockingLedger(InMemoryBookingLedger):
    """Ledger that holds every create call until ``release`` is set.

    Must be built inside a running event loop.
    """

    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def create(self, draft, nightly_price, room_name=None):
        self.started.set()
        await self.release.wait()
        return await super().create(draft, nightly_price, room_name)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def room() -> Room:
    return Room(
        id="room-ocean",
        name="Ocean Double",
        category=RoomCategory.DOUBLE,
        description="Double room facing the Atlantic.",
        amenities=["Queen Bed", "Sea View", "WiFi"],
        price=30000,
        max_guests=2,
        images=["https://example.com/ocean.jpg"],
        available=True,
    )


@pytest.fixture
def rooms(room) -> list[Room]:
    return [
        Room(id="room-suite", name="Royal Suite", category=RoomCategory.SUITE,
             price=120000, max_guests=4),
        room,
        Room(id="room-single", name="Compact Single", category=RoomCategory.SINGLE,
             price=18000, max_guests=1),
        Room(id="room-closed", name="Garden Deluxe", category=RoomCategory.DELUXE,
             price=80000, max_guests=3, available=False),
    ]


@pytest.fixture
def ledger() -> InMemoryBookingLedger:
    return InMemoryBookingLedger()


@pytest.fixture
def directory(rooms, ledger) -> InMemoryRoomDirectory:
    return InMemoryRoomDirectory(rooms=rooms, ledger=ledger)


@pytest.fixture
def failing_ledger() -> FailingLedger:
    return FailingLedger()


@pytest.fixture
def blocking_ledger_factory():
    return BlockingLedger


@pytest.fixture
def wizard(room, ledger) -> BookingWizard:
    return BookingWizard(room, ledger, start="2024-06-01")


@pytest.fixture
def fill_wizard():
    """Walk a wizard from date selection to the payment step."""

    def fill(wizard, check_in="2024-06-01", check_out="2024-06-04", guests=2):
        assert wizard.set_dates(check_in, check_out, guests)
        assert wizard.advance()
        wizard.set_guest_details("Ada Obi", "ada@example.com", "+2348012345678")
        assert wizard.advance()
        return wizard

    return fill
