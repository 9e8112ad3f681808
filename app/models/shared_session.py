"""Shared jam session model.

Before meeting someone, a musician can share the session details (who,
where, when) with trusted contacts without starting a monitored check-in.
Each share is recorded here; the per-contact messages go through the
safety notification outbox.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class SharedSession(SQLModel, table=True):
    """A record of session details shared with contacts.

    Attributes:
        id: Unique identifier (UUID).
        shared_by: Display name of the musician who shared the details.
        counterpart_id: User ID of the musician being met.
        counterpart_name: Display name of the musician being met.
        session_time: When the session starts.
        location: Where the session happens.
        notes: Free-form notes from the musician.
        shared_with: IDs of the contacts the details were sent to.
        shared_at: When the details were shared.
        status: "active" once recorded.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    shared_by: str = ""
    counterpart_id: str
    counterpart_name: str
    session_time: datetime
    location: str
    notes: str = ""
    shared_with: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    shared_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: str = "active"
