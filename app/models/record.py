"""Persistence row for check-ins.

The manager works on three ordered in-memory collections. Each check-in is
stored as one row tagged with the collection it belongs to and its position
within that collection, so a reload reproduces the same ordering (the
historical collection is most-recent-first).
"""

from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class CheckInRecord(SQLModel, table=True):
    """A stored check-in.

    Attributes:
        id: Row identifier.
        check_in_id: The CheckIn's UUID.
        collection: One of "scheduled", "active" or "historical".
        position: Index within the collection.
        payload: The CheckIn serialized as JSON.
    """
    id: int | None = Field(default=None, primary_key=True)
    check_in_id: UUID = Field(index=True, unique=True)
    collection: str = Field(index=True)
    position: int
    payload: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
