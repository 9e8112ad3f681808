"""Share jam session details with trusted contacts.

Sharing is lighter than a check-in: nothing is monitored. The musician
picks contacts, the share is recorded, and each contact receives the
session details through the outbox.
"""
import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from app.checkins.errors import ValidationError
from app.checkins.notifier import OutboxNotifier
from app.models import EmergencyContact, SharedSession

logger = logging.getLogger(__name__)


def alert_contacts(contacts: Iterable[EmergencyContact]) -> list[EmergencyContact]:
    """Contacts that accept session alerts, in the order given."""
    return [c for c in contacts if c.receive_session_alerts]


def can_share(counterpart_name: str, location: str, contacts: Iterable[EmergencyContact]) -> bool:
    """Whether there is enough to share: a counterpart, a location and a contact."""
    return bool(counterpart_name.strip()) and bool(location.strip()) and bool(alert_contacts(contacts))


class SessionSharer:
    """Records shared sessions and queues the contact messages.

    Args:
        engine: Database holding the SharedSession table.
        notifier: Outbox the per-contact messages are written to.
        clock: Returns the current time. Injected so tests can simulate it.
    """

    def __init__(
        self,
        engine: Engine,
        notifier: OutboxNotifier,
        clock: Callable[[], datetime] | None = None,
    ):
        self.engine = engine
        self.notifier = notifier
        self.clock = clock or (lambda: datetime.now(UTC))

    async def share(
        self,
        counterpart_id: str,
        counterpart_name: str,
        session_time: datetime,
        location: str,
        contacts: Iterable[EmergencyContact],
        notes: str = "",
        shared_by: str = "",
    ) -> SharedSession:
        """
        Share session details with the selected contacts.

        Contacts that opted out of session alerts are dropped. The share is
        recorded even if some contact messages fail; those failures are
        logged.

        Raises:
            ValidationError: if the counterpart or location is empty, or no
                selected contact accepts session alerts.
        """
        selected = alert_contacts(contacts)
        if not counterpart_name.strip():
            raise ValidationError("A musician to meet is required")
        if not location.strip():
            raise ValidationError("Location is required")
        if not selected:
            raise ValidationError("Select at least one contact that accepts session alerts")

        shared = SharedSession(
            shared_by=shared_by,
            counterpart_id=counterpart_id,
            counterpart_name=counterpart_name,
            session_time=session_time,
            location=location,
            notes=notes,
            shared_with=[str(c.id) for c in selected],
            shared_at=self.clock(),
        )
        shared = await asyncio.to_thread(self._record, shared)

        try:
            await self.notifier.share_session(shared, selected)
        except Exception as e:
            logger.error(f"Failed to notify contacts for shared session {shared.id}: {e}")

        logger.info(f"Jam session details shared with {len(selected)} contacts")
        return shared

    def list_shared(self) -> list[SharedSession]:
        """Every shared session, most recent first."""
        with Session(self.engine) as session:
            statement = select(SharedSession).order_by(SharedSession.shared_at.desc())
            return list(session.exec(statement).all())

    def _record(self, shared: SharedSession) -> SharedSession:
        with Session(self.engine) as session:
            session.add(shared)
            session.commit()
            session.refresh(shared)
            session.expunge(shared)
        return shared
