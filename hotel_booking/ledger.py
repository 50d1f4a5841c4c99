import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from hotel_booking import errors
from hotel_booking.data import generate_booking_id
from hotel_booking.dates import validate_stay
from hotel_booking.models import ACTIVE_STATUSES, Booking, BookingDraft, BookingStatus
from hotel_booking.pricing import quote

logger = logging.getLogger(__name__)

UNKNOWN_ROOM_NAME = "Unknown Room"


class BookingLedger(ABC):
    """The authoritative, append-mostly collection of bookings."""

    @abstractmethod
    async def list_all(self) -> list[Booking]:
        """All bookings, newest first."""

    @abstractmethod
    async def get(self, booking_id: str) -> Booking:
        """Booking by ID. Raises ``NotFound`` if absent."""

    @abstractmethod
    async def create(
        self, draft: BookingDraft, nightly_price: int, room_name: Optional[str] = None
    ) -> Booking:
        """Price the draft and record it as a confirmed booking.

        Raises ``ValidationError`` unless check-out is after check-in.

        Not idempotent: every call records a new booking with a new ID.
        """

    @abstractmethod
    async def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        """Move a booking to ``status``. Raises ``NotFound`` if absent."""

    @abstractmethod
    async def list_by_email(self, email: str) -> list[Booking]:
        """Bookings made with a guest email, newest first."""

    @abstractmethod
    async def list_by_room(self, room_id: str) -> list[Booking]:
        """Confirmed and pending bookings of a room, earliest check-in first."""

    async def cancel(self, booking_id: str) -> Booking:
        return await self.update_status(booking_id, BookingStatus.CANCELLED)


class InMemoryBookingLedger(BookingLedger):
    """Booking ledger held in process memory."""

    def __init__(self, bookings: Optional[list[Booking]] = None):
        self._bookings: dict[str, Booking] = {}
        for booking in bookings or []:
            self._bookings[booking.id] = booking.model_copy()

    async def list_all(self) -> list[Booking]:
        return self._newest_first(self._bookings.values())

    async def get(self, booking_id: str) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise errors.NotFound("booking", booking_id)
        return booking.model_copy()

    async def create(
        self, draft: BookingDraft, nightly_price: int, room_name: Optional[str] = None
    ) -> Booking:
        validate_stay(draft.check_in, draft.check_out)
        price = quote(nightly_price, draft.check_in, draft.check_out)

        booking_id = generate_booking_id()
        while booking_id in self._bookings:
            booking_id = generate_booking_id()

        booking = Booking(
            id=booking_id,
            room_id=draft.room_id,
            room_name=room_name or UNKNOWN_ROOM_NAME,
            guest_name=draft.guest_name,
            guest_email=draft.guest_email,
            guest_phone=draft.guest_phone,
            check_in=draft.check_in,
            check_out=draft.check_out,
            guests=draft.guests,
            total_price=price.total_price,
            status=BookingStatus.CONFIRMED,
            created_at=datetime.now(timezone.utc),
        )
        self._bookings[booking_id] = booking

        logger.info(
            f"Booking created: {booking_id}, room={draft.room_id}, "
            f"nights={price.nights}, total={price.total_price}"
        )
        return booking.model_copy()

    async def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        if booking_id not in self._bookings:
            raise errors.NotFound("booking", booking_id)

        status = BookingStatus(status)
        updated = self._bookings[booking_id].model_copy(update={"status": status})
        self._bookings[booking_id] = updated
        logger.info(f"Booking {booking_id} updated: status={status.value}")
        return updated.model_copy()

    async def list_by_email(self, email: str) -> list[Booking]:
        return self._newest_first(b for b in self._bookings.values() if b.guest_email == email)

    async def list_by_room(self, room_id: str) -> list[Booking]:
        bookings = [
            b for b in self._bookings.values()
            if b.room_id == room_id and b.status in ACTIVE_STATUSES
        ]
        bookings.sort(key=lambda b: b.check_in)
        return [b.model_copy() for b in bookings]

    @staticmethod
    def _newest_first(bookings) -> list[Booking]:
        # Insertion order breaks timestamp ties
        ordered = sorted(reversed(list(bookings)), key=lambda b: b.created_at, reverse=True)
        return [b.model_copy() for b in ordered]
