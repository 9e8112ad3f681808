"""Safety notification outbox model.

Every message destined for an emergency contact is recorded here first. A
separate push/SMS dispatcher reads the outbox and performs delivery; the
rows also serve as an audit trail of who was told what, and when.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

KIND_REMINDER = "reminder"
KIND_SESSION_UPDATE = "session_update"
KIND_EMERGENCY_ALERT = "emergency_alert"
KIND_SESSION_SHARE = "safety_session_alert"


class SafetyNotification(SQLModel, table=True):
    """A notification queued for delivery.

    Attributes:
        id: Unique identifier (UUID).
        check_in_id: The check-in this notification is about, if any.
        shared_session_id: The shared session this notification is about,
            if any.
        kind: "reminder" (to the musician), "session_update",
            "emergency_alert" or "safety_session_alert" (to a contact).
        contact_name: Recipient name; empty for reminders.
        contact_phone: Recipient phone; empty for reminders.
        contact_email: Recipient email, if known.
        message: Body text.
        deliver_at: Earliest time the dispatcher should deliver it.
        created_at: When the row was written.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    check_in_id: UUID | None = Field(default=None, index=True)
    shared_session_id: UUID | None = Field(default=None, index=True)
    kind: str = Field(index=True)
    contact_name: str = ""
    contact_phone: str = ""
    contact_email: str | None = None
    message: str
    deliver_at: datetime
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
