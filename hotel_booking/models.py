from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class RoomCategory(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    SUITE = "suite"
    DELUXE = "deluxe"


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"


# Statuses that hold a room for their date range
ACTIVE_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.PENDING)


class RoomCreate(BaseModel):
    """Room fields supplied by an admin. Prices are whole naira."""
    name: str = Field(min_length=1)
    category: RoomCategory
    description: str = ""
    amenities: list[str] = Field(default_factory=list)
    price: int = Field(ge=0)
    max_guests: int = Field(ge=1)
    images: list[str] = Field(default_factory=list)
    available: bool = True


class Room(RoomCreate):
    """Room model."""
    id: str


class RoomUpdate(BaseModel):
    """Partial room update. Only fields that are set get replaced."""
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[RoomCategory] = None
    description: Optional[str] = None
    amenities: Optional[list[str]] = None
    price: Optional[int] = Field(None, ge=0)
    max_guests: Optional[int] = Field(None, ge=1)
    images: Optional[list[str]] = None
    available: Optional[bool] = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class BookingDraft(BaseModel):
    """In-progress booking collected by the wizard. Never stored as-is."""
    room_id: str
    check_in: date
    check_out: date
    guests: int = 1
    guest_name: str = ""
    guest_email: str = ""
    guest_phone: str = ""


class Booking(BaseModel):
    """Booking model."""
    id: str
    room_id: str
    room_name: str
    guest_name: str
    guest_email: str
    guest_phone: str
    check_in: date
    check_out: date
    guests: int = Field(ge=1)
    total_price: int = Field(ge=0)
    status: BookingStatus = BookingStatus.CONFIRMED
    created_at: datetime


class DatesRequest(BaseModel):
    """Date and guest selection for the first wizard step."""
    check_in: date
    check_out: date
    guests: Optional[int] = Field(None, ge=1)


class GuestDetailsRequest(BaseModel):
    """Guest contact details for the second wizard step."""
    guest_name: str = ""
    guest_email: str = ""
    guest_phone: str = ""


class ViewChangeRequest(BaseModel):
    view: str = Field(description="Top-level view (customer, admin)")


class BookingStatusUpdateRequest(BaseModel):
    """Booking update request for PATCH endpoint."""
    status: BookingStatus = Field(description="Booking status (confirmed, pending, cancelled)")


class SessionResponse(BaseModel):
    """Session state response."""
    session_id: str
    view: str
    customer_view: str
    selected_room: Optional[Room] = None
    wizard: Optional[dict] = None
