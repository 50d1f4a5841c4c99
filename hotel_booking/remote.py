import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from hotel_booking import errors
from hotel_booking.dates import DateLike, parse_date, validate_stay
from hotel_booking.directory import RoomDirectory
from hotel_booking.ledger import UNKNOWN_ROOM_NAME, BookingLedger
from hotel_booking.models import (
    ACTIVE_STATUSES,
    Booking,
    BookingDraft,
    BookingStatus,
    Room,
    RoomCreate,
    RoomUpdate,
)
from hotel_booking.pricing import from_minor_units, quote, to_minor_units

logger = logging.getLogger(__name__)

BOOKING_SELECT = "*,rooms(name)"


class SupabaseClient:
    """Thin async client for the hosted backend's REST interface."""

    def __init__(
        self,
        url: str,
        key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.http = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            timeout=timeout,
            transport=transport,
        )
        logger.info(f"Remote store client initialized: {url}")

    async def request(
        self,
        method: str,
        path: str,
        failure: str,
        params: Optional[dict] = None,
        json: Any = None,
        representation: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises ``RemoteFailure`` with ``failure`` as its message when the
        request cannot be sent, the backend answers with an error status, or
        the body is not JSON.
        """
        headers = {"Prefer": "return=representation"} if representation else None
        try:
            response = await self.http.request(method, path, params=params, json=json, headers=headers)
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(f"{failure}: {exc.response.status_code} {exc.response.text}")
            raise errors.RemoteFailure(failure, status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            logger.error(f"{failure}: {exc}")
            raise errors.RemoteFailure(failure) from exc
        except ValueError as exc:
            logger.error(f"{failure}: undecodable response body: {exc}")
            raise errors.RemoteFailure(failure) from exc

    async def rpc(self, function: str, args: dict, failure: str) -> Any:
        return await self.request("POST", f"/rpc/{function}", failure, json=args)

    async def aclose(self) -> None:
        await self.http.aclose()


def room_from_row(row: dict) -> Room:
    try:
        return Room(
            id=str(row["id"]),
            name=row["name"],
            category=row["type"],
            description=row.get("description") or "",
            amenities=row.get("amenities") or [],
            price=from_minor_units(row["price"]),
            max_guests=row["max_guests"],
            images=row.get("images") or [],
            available=row.get("available", True),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.error(f"Malformed room row from backend: {exc}")
        raise errors.RemoteFailure("Malformed room row from backend") from exc


def room_to_row(fields: dict) -> dict:
    """Map domain room fields onto table columns, converting price to kobo."""
    columns = {"category": "type"}
    row = {}
    for name, value in fields.items():
        if name == "price":
            value = to_minor_units(value)
        elif name == "category":
            value = value.value if hasattr(value, "value") else value
        row[columns.get(name, name)] = value
    return row


def booking_from_row(row: dict) -> Booking:
    try:
        joined = row.get("rooms") or {}
        return Booking(
            id=str(row["id"]),
            room_id=str(row["room_id"]),
            room_name=row.get("room_name") or joined.get("name") or UNKNOWN_ROOM_NAME,
            guest_name=row["guest_name"],
            guest_email=row["guest_email"],
            guest_phone=row["guest_phone"],
            check_in=parse_date(row["check_in"]),
            check_out=parse_date(row["check_out"]),
            guests=row["guests"],
            total_price=from_minor_units(row["total_price"]),
            status=row["status"],
            created_at=row["created_at"],
        )
    except (AttributeError, KeyError, TypeError, ValueError, errors.ValidationError) as exc:
        logger.error(f"Malformed booking row from backend: {exc}")
        raise errors.RemoteFailure("Malformed booking row from backend") from exc


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class RemoteRoomDirectory(RoomDirectory):
    """Room directory backed by the hosted ``rooms`` table."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def list_all(self) -> list[Room]:
        rows = await self.client.request(
            "GET", "/rooms", "Failed to fetch rooms",
            params={"select": "*", "order": "price.asc"},
        )
        return [room_from_row(row) for row in rows]

    async def get(self, room_id: str) -> Room:
        rows = await self.client.request(
            "GET", "/rooms", "Failed to fetch room",
            params={"select": "*", "id": f"eq.{room_id}"},
        )
        if not rows:
            raise errors.NotFound("room", room_id)
        return room_from_row(rows[0])

    async def create(self, room: RoomCreate) -> Room:
        rows = await self.client.request(
            "POST", "/rooms", "Failed to create room",
            json=room_to_row(room.model_dump()),
            representation=True,
        )
        created = room_from_row(rows[0])
        logger.info(f"Room created: {created.id}, name={created.name}")
        return created

    async def update(self, room_id: str, changes: RoomUpdate) -> Room:
        row = room_to_row(changes.changes())
        row["updated_at"] = _utcnow()
        rows = await self.client.request(
            "PATCH", "/rooms", "Failed to update room",
            params={"id": f"eq.{room_id}"},
            json=row,
            representation=True,
        )
        if not rows:
            raise errors.NotFound("room", room_id)
        return room_from_row(rows[0])

    async def delete(self, room_id: str) -> None:
        rows = await self.client.request(
            "DELETE", "/rooms", "Failed to delete room",
            params={"id": f"eq.{room_id}"},
            representation=True,
        )
        if not rows:
            raise errors.NotFound("room", room_id)
        logger.info(f"Room deleted: {room_id}")

    async def list_available(
        self, check_in: DateLike, check_out: DateLike, guests: int = 1
    ) -> list[Room]:
        start, end = validate_stay(check_in, check_out)
        rows = await self.client.rpc(
            "get_available_rooms",
            {"p_check_in": start.isoformat(), "p_check_out": end.isoformat(), "p_guests": guests},
            "Failed to fetch available rooms",
        )
        return [room_from_row(row) for row in rows or []]

    async def is_available(self, room_id: str, check_in: DateLike, check_out: DateLike) -> bool:
        start, end = validate_stay(check_in, check_out)
        result = await self.client.rpc(
            "check_room_availability",
            {"p_room_id": room_id, "p_check_in": start.isoformat(), "p_check_out": end.isoformat()},
            "Failed to check availability",
        )
        return bool(result)


class RemoteBookingLedger(BookingLedger):
    """Booking ledger backed by the hosted ``bookings`` table.

    Creation goes through the ``create_booking`` procedure, which is where
    the backend checks availability and inserts atomically.
    """

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def _select(self, failure: str, **filters) -> list[Booking]:
        params = {"select": BOOKING_SELECT, **filters}
        rows = await self.client.request("GET", "/bookings", failure, params=params)
        return [booking_from_row(row) for row in rows]

    async def list_all(self) -> list[Booking]:
        return await self._select("Failed to fetch bookings", order="created_at.desc")

    async def get(self, booking_id: str) -> Booking:
        bookings = await self._select("Failed to fetch booking", id=f"eq.{booking_id}")
        if not bookings:
            raise errors.NotFound("booking", booking_id)
        return bookings[0]

    async def create(
        self, draft: BookingDraft, nightly_price: int, room_name: Optional[str] = None
    ) -> Booking:
        validate_stay(draft.check_in, draft.check_out)
        price = quote(nightly_price, draft.check_in, draft.check_out)
        booking_id = await self.client.rpc(
            "create_booking",
            {
                "p_room_id": draft.room_id,
                "p_guest_name": draft.guest_name,
                "p_guest_email": draft.guest_email,
                "p_guest_phone": draft.guest_phone,
                "p_check_in": draft.check_in.isoformat(),
                "p_check_out": draft.check_out.isoformat(),
                "p_guests": draft.guests,
                "p_total_price": to_minor_units(price.total_price),
            },
            "Failed to create booking",
        )
        if not booking_id:
            raise errors.RemoteFailure("Failed to create booking")

        try:
            booking = await self.get(str(booking_id))
        except errors.NotFound as exc:
            logger.error(
                f"Booking {booking_id} was created but could not be read back; it needs reconciliation"
            )
            raise errors.RemoteFailure("Failed to retrieve created booking") from exc

        if room_name and booking.room_name == UNKNOWN_ROOM_NAME:
            booking = booking.model_copy(update={"room_name": room_name})
        logger.info(f"Booking created: {booking.id}, room={draft.room_id}, total={booking.total_price}")
        return booking

    async def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        status = BookingStatus(status)
        rows = await self.client.request(
            "PATCH", "/bookings", "Failed to update booking status",
            params={"id": f"eq.{booking_id}", "select": BOOKING_SELECT},
            json={"status": status.value, "updated_at": _utcnow()},
            representation=True,
        )
        if not rows:
            raise errors.NotFound("booking", booking_id)
        logger.info(f"Booking {booking_id} updated: status={status.value}")
        return booking_from_row(rows[0])

    async def list_by_email(self, email: str) -> list[Booking]:
        return await self._select(
            "Failed to fetch bookings", guest_email=f"eq.{email}", order="created_at.desc"
        )

    async def list_by_room(self, room_id: str) -> list[Booking]:
        active = ",".join(status.value for status in ACTIVE_STATUSES)
        return await self._select(
            "Failed to fetch room bookings",
            room_id=f"eq.{room_id}",
            status=f"in.({active})",
            order="check_in.asc",
        )
