"""Check-in errors."""


class CheckInError(Exception):
    """Base class for check-in errors."""


class ValidationError(CheckInError):
    """Scheduling times are out of order or in the past."""


class NotFoundError(CheckInError):
    """No check-in with that id in the collection the operation requires."""

    def __init__(self, check_in_id):
        super().__init__(f"Check-in not found: {check_in_id}")
        self.check_in_id = check_in_id


class DeliveryError(CheckInError):
    """One or more notifications could not be recorded.

    Raised by notifiers after every contact has been attempted. Never
    propagated past the manager.
    """

    def __init__(self, message: str, failed_contacts: list[str] | None = None):
        super().__init__(message)
        self.failed_contacts = failed_contacts or []
