import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from hotel_booking import errors
from hotel_booking.data import generate_room_id, get_seed_rooms
from hotel_booking.dates import DateLike, ranges_overlap, validate_stay
from hotel_booking.models import Room, RoomCreate, RoomUpdate

logger = logging.getLogger(__name__)


class RoomDirectory(ABC):
    """The authoritative collection of rooms.

    Every backing exposes the same async contract so the wizard and the
    admin editor never know which one they talk to.
    """

    @abstractmethod
    async def list_all(self) -> list[Room]:
        """All rooms ordered by ascending nightly price."""

    @abstractmethod
    async def get(self, room_id: str) -> Room:
        """Room by ID. Raises ``NotFound`` if absent."""

    @abstractmethod
    async def create(self, room: RoomCreate) -> Room:
        """Store a new room under a freshly assigned ID."""

    @abstractmethod
    async def update(self, room_id: str, changes: RoomUpdate) -> Room:
        """Replace the fields set in ``changes``. Raises ``NotFound`` if absent."""

    @abstractmethod
    async def delete(self, room_id: str) -> None:
        """Remove a room. Raises ``NotFound`` if absent."""

    @abstractmethod
    async def list_available(
        self, check_in: DateLike, check_out: DateLike, guests: int = 1
    ) -> list[Room]:
        """Rooms usable for the stay and party size."""

    @abstractmethod
    async def is_available(self, room_id: str, check_in: DateLike, check_out: DateLike) -> bool:
        """Whether a room is free for the stay."""


class InMemoryRoomDirectory(RoomDirectory):
    """Room directory held in process memory, seeded with the sample rooms.

    Availability queries consult the attached ledger for overlapping active
    bookings, mirroring what the hosted backend's functions do.
    """

    def __init__(self, rooms: Optional[list[Room]] = None, ledger=None):
        if rooms is None:
            rooms = get_seed_rooms()
        self._rooms: dict[str, Room] = {room.id: room.model_copy(deep=True) for room in rooms}
        self.ledger = ledger

    async def list_all(self) -> list[Room]:
        rooms = sorted(self._rooms.values(), key=lambda room: room.price)
        return [room.model_copy(deep=True) for room in rooms]

    async def get(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise errors.NotFound("room", room_id)
        return room.model_copy(deep=True)

    async def create(self, room: RoomCreate) -> Room:
        room_id = generate_room_id()
        while room_id in self._rooms:
            room_id = generate_room_id()

        created = Room(id=room_id, **room.model_dump())
        self._rooms[room_id] = created
        logger.info(f"Room created: {room_id}, name={created.name}, price={created.price}")
        return created.model_copy(deep=True)

    async def update(self, room_id: str, changes: RoomUpdate) -> Room:
        if room_id not in self._rooms:
            raise errors.NotFound("room", room_id)

        fields = changes.changes()
        updated = self._rooms[room_id].model_copy(update=fields, deep=True)
        self._rooms[room_id] = updated
        logger.info(f"Room {room_id} updated: fields={sorted(fields)}")
        return updated.model_copy(deep=True)

    async def delete(self, room_id: str) -> None:
        if self._rooms.pop(room_id, None) is None:
            raise errors.NotFound("room", room_id)
        logger.info(f"Room deleted: {room_id}")

    async def list_available(
        self, check_in: DateLike, check_out: DateLike, guests: int = 1
    ) -> list[Room]:
        start, end = validate_stay(check_in, check_out)
        results = []
        for room in await self.list_all():
            if not room.available or room.max_guests < guests:
                continue
            if await self._is_free(room.id, start, end):
                results.append(room)
        logger.debug(f"{len(results)} rooms available for {start}..{end}, guests={guests}")
        return results

    async def is_available(self, room_id: str, check_in: DateLike, check_out: DateLike) -> bool:
        start, end = validate_stay(check_in, check_out)
        room = await self.get(room_id)
        return room.available and await self._is_free(room_id, start, end)

    async def _is_free(self, room_id: str, start: date, end: date) -> bool:
        if self.ledger is None:
            return True
        for booking in await self.ledger.list_by_room(room_id):
            if ranges_overlap(booking.check_in, booking.check_out, start, end):
                return False
        return True
