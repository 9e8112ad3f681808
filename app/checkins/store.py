"""Persistence for check-in collections."""
import logging
from typing import NamedTuple, Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from app.models import CheckIn, CheckInRecord

logger = logging.getLogger(__name__)

SCHEDULED = "scheduled"
ACTIVE = "active"
HISTORICAL = "historical"


class Collections(NamedTuple):
    """The three ordered check-in collections."""
    scheduled: list[CheckIn]
    active: list[CheckIn]
    historical: list[CheckIn]


class CheckInStore(Protocol):
    """Loads and saves all check-in collections at once."""

    def load_all(self) -> Collections: ...

    def save_all(
        self,
        scheduled: list[CheckIn],
        active: list[CheckIn],
        historical: list[CheckIn],
    ) -> None: ...


class SqlCheckInStore:
    """CheckInStore backed by the CheckInRecord table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def load_all(self) -> Collections:
        """Read every stored check-in, grouped and ordered by collection."""
        collections = Collections([], [], [])
        by_name = {
            SCHEDULED: collections.scheduled,
            ACTIVE: collections.active,
            HISTORICAL: collections.historical,
        }

        with Session(self.engine) as session:
            statement = select(CheckInRecord).order_by(
                CheckInRecord.collection, CheckInRecord.position
            )
            for record in session.exec(statement).all():
                target = by_name.get(record.collection)
                if target is None:
                    logger.warning(
                        f"Ignoring check-in {record.check_in_id} in unknown collection "
                        f"{record.collection!r}"
                    )
                    continue
                target.append(CheckIn.model_validate(record.payload))

        logger.info(
            f"Loaded check-ins: {len(collections.scheduled)} scheduled, "
            f"{len(collections.active)} active, {len(collections.historical)} historical"
        )
        return collections

    def save_all(
        self,
        scheduled: list[CheckIn],
        active: list[CheckIn],
        historical: list[CheckIn],
    ) -> None:
        """Replace all stored check-ins in a single transaction."""
        with Session(self.engine) as session:
            for record in session.exec(select(CheckInRecord)).all():
                session.delete(record)
            session.flush()
            for name, items in ((SCHEDULED, scheduled), (ACTIVE, active), (HISTORICAL, historical)):
                for position, check_in in enumerate(items):
                    session.add(
                        CheckInRecord(
                            check_in_id=check_in.id,
                            collection=name,
                            position=position,
                            payload=check_in.model_dump(mode="json"),
                        )
                    )
            session.commit()
