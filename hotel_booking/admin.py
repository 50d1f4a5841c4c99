import logging
from typing import Optional

from pydantic import BaseModel, Field

from hotel_booking.dates import calculate_nights, format_date
from hotel_booking.directory import RoomDirectory
from hotel_booking.ledger import BookingLedger
from hotel_booking.models import BookingStatus, Room, RoomCategory, RoomCreate, RoomUpdate
from hotel_booking.pricing import format_naira

logger = logging.getLogger(__name__)


def split_list(value: str) -> list[str]:
    """Split a comma-separated form field, dropping blank items."""
    return [item.strip() for item in value.split(",") if item.strip()]


class RoomForm(BaseModel):
    """Admin room form. Amenities and images are edited as comma-separated text."""
    name: str = ""
    category: RoomCategory = RoomCategory.SINGLE
    description: str = ""
    amenities: str = ""
    price: int = Field(0, ge=0)
    max_guests: int = Field(1, ge=1)
    images: str = ""
    available: bool = True

    @classmethod
    def blank(cls) -> "RoomForm":
        return cls()

    @classmethod
    def from_room(cls, room: Room) -> "RoomForm":
        return cls(
            name=room.name,
            category=room.category,
            description=room.description,
            amenities=", ".join(room.amenities),
            price=room.price,
            max_guests=room.max_guests,
            images=", ".join(room.images),
            available=room.available,
        )

    def to_room_create(self) -> RoomCreate:
        return RoomCreate(
            name=self.name,
            category=self.category,
            description=self.description,
            amenities=split_list(self.amenities),
            price=self.price,
            max_guests=self.max_guests,
            images=split_list(self.images),
            available=self.available,
        )


class BookingRow(BaseModel):
    """One line of the read-only bookings table."""
    id: str
    guest_name: str
    guest_email: str
    guest_phone: str
    room_name: str
    check_in: str
    check_out: str
    nights: int
    guests: int
    total_price: int
    total_display: str
    status: BookingStatus


class DashboardSummary(BaseModel):
    total_rooms: int
    available_rooms: int
    total_bookings: int
    confirmed_bookings: int
    confirmed_revenue: int
    confirmed_revenue_display: str


class InventoryEditor:
    """Form-driven room management plus the bookings overview.

    Talks to the directory directly; bookings are only read.
    """

    def __init__(self, directory: RoomDirectory, ledger: BookingLedger):
        self.directory = directory
        self.ledger = ledger
        self.form: Optional[RoomForm] = None
        self.editing_room_id: Optional[str] = None

    def start_new(self) -> RoomForm:
        self.form = RoomForm.blank()
        self.editing_room_id = None
        return self.form

    async def start_edit(self, room_id: str) -> RoomForm:
        room = await self.directory.get(room_id)
        self.form = RoomForm.from_room(room)
        self.editing_room_id = room.id
        return self.form

    def cancel(self):
        self.form = None
        self.editing_room_id = None

    async def save(self, form: Optional[RoomForm] = None) -> Room:
        """Create a room, or replace every field of the room being edited."""
        form = form or self.form or RoomForm.blank()
        fields = form.to_room_create()

        if self.editing_room_id:
            room = await self.directory.update(self.editing_room_id, RoomUpdate(**fields.model_dump()))
        else:
            room = await self.directory.create(fields)

        logger.info(f"Room saved from admin form: {room.id}, editing={self.editing_room_id is not None}")
        self.cancel()
        return room

    async def delete(self, room_id: str):
        await self.directory.delete(room_id)
        if self.editing_room_id == room_id:
            self.cancel()

    async def bookings_table(self) -> list[BookingRow]:
        rows = []
        for booking in await self.ledger.list_all():
            rows.append(BookingRow(
                id=booking.id,
                guest_name=booking.guest_name,
                guest_email=booking.guest_email,
                guest_phone=booking.guest_phone,
                room_name=booking.room_name,
                check_in=format_date(booking.check_in),
                check_out=format_date(booking.check_out),
                nights=calculate_nights(booking.check_in, booking.check_out),
                guests=booking.guests,
                total_price=booking.total_price,
                total_display=format_naira(booking.total_price),
                status=booking.status,
            ))
        return rows

    async def summary(self) -> DashboardSummary:
        rooms = await self.directory.list_all()
        bookings = await self.ledger.list_all()
        confirmed = [b for b in bookings if b.status == BookingStatus.CONFIRMED]
        revenue = sum(b.total_price for b in confirmed)
        return DashboardSummary(
            total_rooms=len(rooms),
            available_rooms=sum(1 for room in rooms if room.available),
            total_bookings=len(bookings),
            confirmed_bookings=len(confirmed),
            confirmed_revenue=revenue,
            confirmed_revenue_display=format_naira(revenue),
        )
