"""Booking wizard.

A linear, one-directional state machine over four steps::

    dates -> details -> payment -> confirmation

The first two steps only collect and check input. Leaving ``payment`` is
the single transition with an external effect: it records the booking in
the ledger. ``confirmation`` is terminal; only the view router can discard
the wizard from there.
"""
import logging
from datetime import timedelta
from enum import Enum
from typing import Optional

from hotel_booking import errors
from hotel_booking.dates import DateLike, parse_date, today
from hotel_booking.ledger import BookingLedger
from hotel_booking.models import Booking, BookingDraft, Room
from hotel_booking.pricing import PriceQuote, quote

logger = logging.getLogger(__name__)

BOOKING_FAILED_MESSAGE = "We could not complete your booking. Please try again."


class WizardStep(str, Enum):
    DATES = "dates"
    DETAILS = "details"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"


STEP_ORDER = [WizardStep.DATES, WizardStep.DETAILS, WizardStep.PAYMENT, WizardStep.CONFIRMATION]

_NEXT_STEP = {
    WizardStep.DATES: WizardStep.DETAILS,
    WizardStep.DETAILS: WizardStep.PAYMENT,
    WizardStep.PAYMENT: WizardStep.CONFIRMATION,
}


class BookingWizard:
    """Collects a booking for one room and submits it exactly once.

    Input problems never escape as exceptions: the setters and ``advance``
    return ``False`` and leave the messages in ``errors``. Operations that
    make no sense in the current step raise ``InvalidStep``.
    """

    def __init__(self, room: Room, ledger: BookingLedger, start: Optional[DateLike] = None):
        check_in = parse_date(start) if start is not None else today()
        self.room = room
        self.ledger = ledger
        self.step = WizardStep.DATES
        self.draft = BookingDraft(
            room_id=room.id,
            check_in=check_in,
            check_out=check_in + timedelta(days=1),
            guests=1,
        )
        self.errors: list[str] = []
        self.error: Optional[str] = None
        self.booking: Optional[Booking] = None
        self.submitting = False

    @property
    def quote(self) -> PriceQuote:
        """Nights and total for the current dates, derived on every read."""
        return quote(self.room.price, self.draft.check_in, self.draft.check_out)

    def _require_step(self, step: WizardStep, action: str):
        if self.step is not step:
            raise errors.InvalidStep(self.step.value, action)

    def set_dates(self, check_in: DateLike, check_out: DateLike, guests: Optional[int] = None) -> bool:
        self._require_step(WizardStep.DATES, "change dates")
        try:
            start, end = parse_date(check_in), parse_date(check_out)
        except errors.ValidationError as exc:
            self.errors = exc.messages
            return False

        self.draft.check_in = start
        self.draft.check_out = end
        if guests is not None:
            self.draft.guests = guests
        self.errors = []
        return True

    def set_guests(self, guests: int) -> bool:
        self._require_step(WizardStep.DATES, "change guests")
        self.draft.guests = guests
        self.errors = []
        return True

    def set_guest_details(self, name: str, email: str, phone: str) -> bool:
        self._require_step(WizardStep.DETAILS, "change guest details")
        self.draft.guest_name = name
        self.draft.guest_email = email
        self.draft.guest_phone = phone
        self.errors = []
        return True

    def validate(self) -> list[str]:
        """Messages for everything that blocks leaving the current step."""
        messages = []
        draft = self.draft

        if self.step is WizardStep.DATES:
            if draft.check_out <= draft.check_in:
                messages.append("Check-out date must be after check-in date")
            if not 1 <= draft.guests <= self.room.max_guests:
                messages.append(f"Guests must be between 1 and {self.room.max_guests}")

        elif self.step is WizardStep.DETAILS:
            # Presence only; email and phone formats are not checked
            if not draft.guest_name.strip():
                messages.append("Guest name is required")
            if not draft.guest_email.strip():
                messages.append("Email address is required")
            if not draft.guest_phone.strip():
                messages.append("Phone number is required")

        elif self.step is WizardStep.CONFIRMATION:
            messages.append("Booking is already complete")

        return messages

    def can_advance(self) -> bool:
        return not self.validate()

    def advance(self) -> bool:
        """Move out of ``dates`` or ``details`` if the step's input is complete."""
        if self.step in (WizardStep.PAYMENT, WizardStep.CONFIRMATION):
            raise errors.InvalidStep(self.step.value, "advance")

        self.errors = self.validate()
        if self.errors:
            logger.debug(f"Wizard for room {self.room.id} blocked in {self.step.value}: {self.errors}")
            return False

        previous, self.step = self.step, _NEXT_STEP[self.step]
        logger.debug(f"Wizard for room {self.room.id}: {previous.value} -> {self.step.value}")
        return True

    async def submit(self) -> Optional[Booking]:
        """Record the booking. Returns it, or ``None`` if the backend failed.

        On failure the wizard stays in ``payment`` with the draft intact and
        ``error`` set, so the guest can retry. A second call while the first
        is still awaiting the ledger is refused.
        """
        if self.submitting:
            raise errors.SubmissionInProgress()
        self._require_step(WizardStep.PAYMENT, "submit")

        self.submitting = True
        self.error = None
        try:
            booking = await self.ledger.create(
                self.draft.model_copy(), self.room.price, room_name=self.room.name
            )
        except errors.RemoteFailure as exc:
            logger.error(f"Booking failed for room {self.room.id}: {exc}", exc_info=True)
            self.error = BOOKING_FAILED_MESSAGE
            return None
        finally:
            self.submitting = False

        self.booking = booking
        self.step = WizardStep.CONFIRMATION
        logger.info(f"Wizard for room {self.room.id} confirmed booking {booking.id}")
        return booking

    def snapshot(self) -> dict:
        """Serializable view of the wizard for API responses."""
        price = self.quote
        return {
            "step": self.step.value,
            "step_number": STEP_ORDER.index(self.step) + 1,
            "room_id": self.room.id,
            "draft": self.draft.model_dump(mode="json"),
            "nightly_price": price.nightly_price,
            "nights": price.nights,
            "total_price": price.total_price,
            "can_advance": self.can_advance(),
            "errors": list(self.errors),
            "error": self.error,
            "submitting": self.submitting,
            "booking": self.booking.model_dump(mode="json") if self.booking else None,
        }
