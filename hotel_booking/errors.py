from typing import Optional


class BookingServiceError(Exception):
    """Base class for all errors raised by the booking service."""


class ValidationError(BookingServiceError):
    """Incomplete or invalid input. Carries one message per failed check."""

    def __init__(self, messages):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class NotFound(BookingServiceError):
    """A referenced record does not exist in its store."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} not found: {record_id}")


class RemoteFailure(BookingServiceError):
    """The persistence backend failed. The original cause is chained."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class InvalidStep(BookingServiceError):
    """An operation was attempted in a wizard step that does not allow it."""

    def __init__(self, step: str, action: str):
        self.step = step
        self.action = action
        super().__init__(f"Cannot {action} while in step '{step}'")


class SubmissionInProgress(BookingServiceError):
    """A booking submission is already in flight for this wizard."""

    def __init__(self):
        super().__init__("A booking submission is already in progress")
