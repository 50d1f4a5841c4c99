from pydantic import BaseModel

from hotel_booking.dates import DateLike, calculate_nights

MINOR_UNITS_PER_NAIRA = 100


class PriceQuote(BaseModel):
    """Derived price for a stay."""
    nightly_price: int
    nights: int
    total_price: int


def quote(nightly_price: int, check_in: DateLike, check_out: DateLike) -> PriceQuote:
    """Calculate the total for a stay from the nightly rate."""
    nights = calculate_nights(check_in, check_out)
    return PriceQuote(
        nightly_price=nightly_price,
        nights=nights,
        total_price=nightly_price * nights,
    )


def to_minor_units(amount: int) -> int:
    """Naira to kobo, for values sent to the persistence backend."""
    return int(amount) * MINOR_UNITS_PER_NAIRA


def from_minor_units(amount) -> int:
    """Kobo to whole naira, for values read from the persistence backend."""
    return int(round(amount / MINOR_UNITS_PER_NAIRA))


def format_naira(amount: int) -> str:
    return f"₦{amount:,}"
