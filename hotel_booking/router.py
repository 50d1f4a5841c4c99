import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from hotel_booking import errors
from hotel_booking.ledger import BookingLedger
from hotel_booking.models import Room
from hotel_booking.wizard import BookingWizard

logger = logging.getLogger(__name__)


class View(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class CustomerView(str, Enum):
    ROOMS = "rooms"
    BOOKING = "booking"


class AppState(BaseModel):
    """Top-level view state. Transitions return a new value."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    view: View = View.CUSTOMER
    customer_view: CustomerView = CustomerView.ROOMS
    selected_room: Optional[Room] = None
    wizard: Optional[BookingWizard] = None


def initial_state() -> AppState:
    return AppState()


def select_room(state: AppState, room: Room, ledger: BookingLedger) -> AppState:
    """Hand a room to a fresh booking wizard."""
    if not room.available:
        raise errors.ValidationError(f"Room '{room.name}' is not available for booking")

    logger.debug(f"Room selected: {room.id}")
    return state.model_copy(update={
        "view": View.CUSTOMER,
        "customer_view": CustomerView.BOOKING,
        "selected_room": room,
        "wizard": BookingWizard(room, ledger),
    })


def back_to_rooms(state: AppState) -> AppState:
    """Discard the selected room and any draft, back to the room list."""
    return state.model_copy(update={
        "customer_view": CustomerView.ROOMS,
        "selected_room": None,
        "wizard": None,
    })


def start_over(state: AppState) -> AppState:
    """Leave a finished (or abandoned) booking and browse again."""
    return back_to_rooms(state)


def change_view(state: AppState, view: View) -> AppState:
    view = View(view)
    if view is View.CUSTOMER:
        return back_to_rooms(state).model_copy(update={"view": View.CUSTOMER})
    return state.model_copy(update={"view": view})
