"""Check-in model for jam session safety monitoring.

This module defines the CheckIn model which represents one planned in-person
jam session that the musician wants monitored. A check-in carries the
emergency contacts to notify, the time the session starts, and the deadline
by which the musician must confirm they are safe.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class CheckInStatus(str, Enum):
    """Lifecycle status of a check-in."""
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EMERGENCY = "emergency"


TERMINAL_STATUSES = frozenset(
    {CheckInStatus.COMPLETED, CheckInStatus.CANCELLED, CheckInStatus.EMERGENCY}
)


class EmergencyReason(str, Enum):
    """Why a check-in was escalated."""
    MANUAL = "manual"
    MISSED_CHECK_IN = "missed_check_in"


class EmergencyContact(SQLModel):
    """A trusted person to notify about a jam session.

    Attributes:
        id: Unique identifier (UUID).
        name: Display name used in logs and outbox rows.
        phone: Phone number for SMS delivery.
        email: Optional email address.
        receive_session_alerts: Whether the contact opted in to routine
            session updates (started, overdue, completed). Emergency alerts
            go to every contact regardless.
    """
    id: UUID = Field(default_factory=uuid4)
    name: str
    phone: str
    email: str | None = None
    receive_session_alerts: bool = True


class CheckIn(SQLModel):
    """A safety check-in tied to an in-person jam session.

    The counterpart, location, times and contacts are fixed at creation.
    Only the status and the lifecycle timestamps change afterwards, and only
    through CheckInManager transitions.

    Attributes:
        id: Unique identifier (UUID).
        counterpart_id: User ID of the musician being met.
        counterpart_name: Display name of the musician being met.
        location: Free-form description of where the session happens.
        scheduled_time: When the session starts.
        check_in_deadline: When the musician is expected to check in safe.
        emergency_contacts: Contacts to notify, in the order given.
        status: Current lifecycle status.
        created_at: When the check-in was scheduled.
        activated_at: Set when the check-in is started.
        completed_at: Set when the musician checks in safe.
        overdue_notified_at: Set the first time contacts were warned that
            the deadline passed. Used to avoid repeating the warning.
        emergency_reason: Set on escalation: a manual trigger by the
            musician, or the monitor after the deadline and grace period.
    """
    id: UUID = Field(default_factory=uuid4)
    counterpart_id: str
    counterpart_name: str
    location: str
    scheduled_time: datetime
    check_in_deadline: datetime
    emergency_contacts: list[EmergencyContact] = Field(default_factory=list)
    status: CheckInStatus = CheckInStatus.SCHEDULED
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    activated_at: datetime | None = None
    completed_at: datetime | None = None
    overdue_notified_at: datetime | None = None
    emergency_reason: EmergencyReason | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_overdue(self, now: datetime) -> bool:
        return now > self.check_in_deadline
