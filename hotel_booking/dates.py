from datetime import date, datetime, timedelta
from typing import Union

from hotel_booking import errors

DateLike = Union[date, str]


def parse_date(value: DateLike) -> date:
    """Parse an ISO ``YYYY-MM-DD`` string into a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError) as exc:
        raise errors.ValidationError(f"Invalid date '{value}'. Use YYYY-MM-DD") from exc


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Calculate number of nights between dates.

    Dates carry no time of day, so the whole-day difference is already the
    ceiling of the elapsed days. Order does not matter.
    """
    return abs((parse_date(check_out) - parse_date(check_in)).days)


def today() -> date:
    return date.today()


def tomorrow() -> date:
    return today() + timedelta(days=1)


def get_today_date() -> str:
    return today().isoformat()


def get_tomorrow_date() -> str:
    return tomorrow().isoformat()


def format_date(value: DateLike) -> str:
    """Format a date the way the storefront shows it, e.g. ``Sat, 1 Jun 2024``."""
    day = parse_date(value)
    return f"{day:%a}, {day.day} {day:%b} {day.year}"


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Half-open ``[start, end)`` overlap, so a check-out day can be a check-in day."""
    return start_a < end_b and end_a > start_b


def validate_stay(check_in: DateLike, check_out: DateLike) -> tuple[date, date]:
    """Parse a stay's dates and require check-out strictly after check-in."""
    start, end = parse_date(check_in), parse_date(check_out)
    if end <= start:
        raise errors.ValidationError("check_out must be after check_in")
    return start, end
