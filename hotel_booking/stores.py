import logging
from dataclasses import dataclass
from typing import Optional

from hotel_booking.config import Settings, settings
from hotel_booking.directory import InMemoryRoomDirectory, RoomDirectory
from hotel_booking.ledger import BookingLedger, InMemoryBookingLedger
from hotel_booking.remote import RemoteBookingLedger, RemoteRoomDirectory, SupabaseClient

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    """The directory and ledger the application works against."""
    directory: RoomDirectory
    ledger: BookingLedger
    client: Optional[SupabaseClient] = None

    async def close(self):
        if self.client is not None:
            await self.client.aclose()


def memory_stores() -> Stores:
    ledger = InMemoryBookingLedger()
    return Stores(directory=InMemoryRoomDirectory(ledger=ledger), ledger=ledger)


def build_stores(config: Settings = settings) -> Stores:
    """Create the stores for the configured backend."""
    backend = config.store_backend.lower()
    if backend == "memory":
        logger.info("Using in-memory room and booking stores")
        return memory_stores()
    if backend == "remote":
        client = SupabaseClient(config.supabase_url, config.supabase_key, timeout=config.remote_timeout)
        return Stores(
            directory=RemoteRoomDirectory(client),
            ledger=RemoteBookingLedger(client),
            client=client,
        )
    raise ValueError(f"Unknown store backend '{config.store_backend}'. Use memory or remote")
