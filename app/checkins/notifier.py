"""Notification dispatch for check-ins."""
import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.checkins.errors import DeliveryError
from app.checkins.messages import (
    emergency_message,
    reminder_message,
    session_update_message,
    share_message,
)
from app.models import CheckIn, EmergencyContact, SafetyNotification, SharedSession
from app.models.notification import (
    KIND_EMERGENCY_ALERT,
    KIND_REMINDER,
    KIND_SESSION_SHARE,
    KIND_SESSION_UPDATE,
)

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Sends check-in messages to the musician and their contacts.

    Implementations receive a snapshot of the check-in and must not keep
    references to it beyond the call. Any method may raise; callers treat
    failures as non-fatal.
    """

    async def schedule_reminder(self, check_in: CheckIn) -> None: ...

    async def notify_contacts(self, check_in: CheckIn, message: str) -> None: ...

    async def send_emergency_alert(self, check_in: CheckIn) -> None: ...


class OutboxNotifier:
    """Notifier that records messages in the safety notification outbox.

    Delivery itself (SMS, push, email) is performed by an external
    dispatcher reading the SafetyNotification table. Database writes run in
    a worker thread so they never block the event loop.
    """

    def __init__(
        self,
        engine: Engine,
        reminder_lead: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] | None = None,
    ):
        self.engine = engine
        self.reminder_lead = reminder_lead
        self.clock = clock or (lambda: datetime.now(UTC))

    async def schedule_reminder(self, check_in: CheckIn) -> None:
        """Queue a reminder for the musician ahead of the session."""
        now = self.clock()
        deliver_at = max(check_in.scheduled_time - self.reminder_lead, now)
        notification = SafetyNotification(
            check_in_id=check_in.id,
            kind=KIND_REMINDER,
            message=reminder_message(check_in),
            deliver_at=deliver_at,
            created_at=now,
        )
        await asyncio.to_thread(self._write, notification)
        logger.debug(f"Scheduled reminder for check-in {check_in.id} at {deliver_at}")

    async def notify_contacts(self, check_in: CheckIn, message: str) -> None:
        """Queue a session update for every contact that opted in."""
        contacts = [c for c in check_in.emergency_contacts if c.receive_session_alerts]
        skipped = len(check_in.emergency_contacts) - len(contacts)
        if skipped:
            logger.debug(f"Skipping {skipped} contacts without session alerts for {check_in.id}")

        body = session_update_message(check_in, message)
        await asyncio.to_thread(
            self._deliver_each, f"check-in {check_in.id}", contacts, KIND_SESSION_UPDATE, body,
            check_in_id=check_in.id,
        )

    async def send_emergency_alert(self, check_in: CheckIn) -> None:
        """Queue an emergency alert for every contact, opted in or not."""
        body = emergency_message(check_in)
        for contact in check_in.emergency_contacts:
            logger.warning(
                f"EMERGENCY: Notifying {contact.name} about jam session with "
                f"{check_in.counterpart_name} at {check_in.location}"
            )
        await asyncio.to_thread(
            self._deliver_each, f"check-in {check_in.id}", check_in.emergency_contacts,
            KIND_EMERGENCY_ALERT, body, check_in_id=check_in.id,
        )

    async def share_session(self, shared: SharedSession, contacts: list[EmergencyContact]) -> None:
        """Queue the shared session details for each selected contact."""
        body = share_message(shared)
        await asyncio.to_thread(
            self._deliver_each, f"shared session {shared.id}", contacts, KIND_SESSION_SHARE, body,
            shared_session_id=shared.id,
        )

    def _write(self, notification: SafetyNotification) -> None:
        with Session(self.engine) as session:
            session.add(notification)
            session.commit()

    def _deliver_each(
        self,
        subject: str,
        contacts: list[EmergencyContact],
        kind: str,
        body: str,
        **links,
    ) -> None:
        """
        Record one outbox row per contact.

        Each contact is committed separately so a failure for one contact
        does not prevent delivery to the others. ``links`` carries the
        check_in_id or shared_session_id the rows refer to.

        Raises:
            DeliveryError: after all contacts were attempted, if any failed.
        """
        failed = []
        now = self.clock()

        for contact in contacts:
            try:
                self._write(
                    SafetyNotification(
                        kind=kind,
                        contact_name=contact.name,
                        contact_phone=contact.phone,
                        contact_email=contact.email,
                        message=body,
                        deliver_at=now,
                        created_at=now,
                        **links,
                    )
                )
                logger.info(f"Notifying emergency contact: {contact.name} ({kind})")
            except Exception as e:
                logger.error(f"Failed to notify {contact.name} for {subject}: {e}")
                failed.append(contact.name)

        if failed:
            raise DeliveryError(
                f"{len(failed)} of {len(contacts)} {kind} notifications failed",
                failed_contacts=failed,
            )
