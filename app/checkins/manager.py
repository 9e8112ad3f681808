"""Jam session check-in lifecycle.

CheckInManager owns every check-in and moves it through

    scheduled -> active -> completed | emergency
    scheduled | active -> cancelled

Each check-in lives in exactly one of three ordered collections: scheduled,
active, or historical (most recent first). Emergency is the exception: an
escalated check-in stays in the active collection so it remains visible to
whoever is watching active sessions, but it accepts no further transitions.

Deadline monitoring is a single periodic sweep over the monitored ids
(driven by app.core.scheduler) rather than one timer per check-in. An id is
added to the monitored set by start() and removed inside the same locked
transition that completes, cancels or escalates it, so no sweep can act on
it afterwards.

Notifications and persistence are best-effort: their failures are logged
and never undo a transition. Store I/O runs in a worker thread while the
lock is held, so saves stay ordered without blocking the event loop.
"""
import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from uuid import UUID

from app.checkins.errors import NotFoundError, ValidationError
from app.checkins.messages import completed_message, overdue_message, started_message
from app.checkins.notifier import Notifier
from app.checkins.store import CheckInStore
from app.models import CheckIn, CheckInStatus, EmergencyContact, EmergencyReason

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = timedelta(minutes=15)


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _coerce_id(check_in_id: UUID | str) -> UUID:
    if isinstance(check_in_id, UUID):
        return check_in_id
    try:
        return UUID(str(check_in_id))
    except ValueError:
        raise NotFoundError(check_in_id) from None


class CheckInManager:
    """Schedules, tracks and monitors jam session check-ins.

    Construct one instance at application start and share it. All
    collection access goes through the methods below; callers only ever
    receive copies of check-ins.

    Args:
        notifier: Sends reminders, contact updates and emergency alerts.
        store: Loads and saves the three collections.
        clock: Returns the current time. Injected so tests can simulate it.
        grace_period: How long past the deadline the monitor waits before
            escalating to an emergency.
    """

    def __init__(
        self,
        notifier: Notifier,
        store: CheckInStore,
        clock: Callable[[], datetime] | None = None,
        grace_period: timedelta = DEFAULT_GRACE_PERIOD,
    ):
        self.notifier = notifier
        self.store = store
        self.clock = clock or (lambda: datetime.now(UTC))
        self.grace_period = grace_period

        self._scheduled: list[CheckIn] = []
        self._active: list[CheckIn] = []
        self._historical: list[CheckIn] = []
        self._monitored: set[UUID] = set()
        self._lock = asyncio.Lock()

    # Read access

    @property
    def has_active_check_in(self) -> bool:
        return bool(self._active)

    @property
    def scheduled(self) -> list[CheckIn]:
        return [self._snapshot(c) for c in self._scheduled]

    @property
    def active(self) -> list[CheckIn]:
        return [self._snapshot(c) for c in self._active]

    @property
    def historical(self) -> list[CheckIn]:
        return [self._snapshot(c) for c in self._historical]

    def is_monitoring(self, check_in_id: UUID | str) -> bool:
        return _coerce_id(check_in_id) in self._monitored

    def get(self, check_in_id: UUID | str) -> CheckIn:
        """Look up a check-in in any collection."""
        check_in_id = _coerce_id(check_in_id)
        for collection in (self._scheduled, self._active, self._historical):
            for check_in in collection:
                if check_in.id == check_in_id:
                    return self._snapshot(check_in)
        raise NotFoundError(check_in_id)

    # Lifecycle

    async def load(self) -> None:
        """
        Replace in-memory state with the stored collections.

        Active check-ins that have not been escalated resume monitoring, so
        a restart does not silently drop a session that is under way.
        """
        collections = await asyncio.to_thread(self.store.load_all)
        async with self._lock:
            self._scheduled = list(collections.scheduled)
            self._active = list(collections.active)
            self._historical = list(collections.historical)
            self._monitored = {c.id for c in self._active if not c.is_terminal}
        logger.info(f"Check-in manager loaded, monitoring {len(self._monitored)} active check-ins")

    def shutdown(self) -> None:
        """Stop monitoring every check-in."""
        count = len(self._monitored)
        self._monitored.clear()
        logger.info(f"Check-in monitoring stopped for {count} check-ins")

    async def schedule(
        self,
        counterpart_id: str,
        counterpart_name: str,
        location: str,
        scheduled_time: datetime,
        check_in_deadline: datetime,
        contacts: Iterable[EmergencyContact],
    ) -> CheckIn:
        """
        Schedule a check-in for an upcoming jam session.

        Raises:
            ValidationError: if scheduled_time is not in the future or the
                deadline is not after scheduled_time.
        """
        logger.info(f"Scheduling check-in for jam session with: {counterpart_name}")

        now = self.clock()
        scheduled_time = _as_utc(scheduled_time)
        check_in_deadline = _as_utc(check_in_deadline)

        if scheduled_time <= now:
            raise ValidationError("Scheduled time must be in the future")
        if check_in_deadline <= scheduled_time:
            raise ValidationError("Check-in deadline must be after the scheduled time")

        check_in = CheckIn(
            counterpart_id=counterpart_id,
            counterpart_name=counterpart_name,
            location=location,
            scheduled_time=scheduled_time,
            check_in_deadline=check_in_deadline,
            emergency_contacts=[c.model_copy() for c in contacts],
            created_at=now,
        )

        async with self._lock:
            self._scheduled.append(check_in)
            await self._save()
            snapshot = self._snapshot(check_in)

        await self._best_effort("schedule reminder", snapshot, self.notifier.schedule_reminder, snapshot)

        logger.info(f"Jam session check-in scheduled successfully: {check_in.id}")
        return snapshot

    async def start(self, check_in_id: UUID | str) -> CheckIn:
        """
        Start a scheduled check-in and begin monitoring its deadline.

        Raises:
            NotFoundError: if the id is not in the scheduled collection.
        """
        check_in_id = _coerce_id(check_in_id)

        async with self._lock:
            index = self._index_of(self._scheduled, check_in_id)
            if check_in_id in self._monitored:
                raise RuntimeError(f"Check-in {check_in_id} is already monitored")

            check_in = self._scheduled.pop(index)
            check_in.status = CheckInStatus.ACTIVE
            check_in.activated_at = self.clock()
            self._active.append(check_in)
            self._monitored.add(check_in_id)
            await self._save()
            snapshot = self._snapshot(check_in)

        await self._best_effort(
            "notify contacts", snapshot, self.notifier.notify_contacts, snapshot, started_message(snapshot)
        )

        logger.info(f"Jam session check-in started: {check_in_id}")
        return snapshot

    async def complete(self, check_in_id: UUID | str) -> CheckIn:
        """
        Mark an active check-in as safely completed.

        Raises:
            NotFoundError: if the id is not an active check-in.
        """
        check_in_id = _coerce_id(check_in_id)

        async with self._lock:
            index = self._index_of(self._active, check_in_id, CheckInStatus.ACTIVE)
            check_in = self._active.pop(index)
            check_in.status = CheckInStatus.COMPLETED
            check_in.completed_at = self.clock()
            self._historical.insert(0, check_in)
            self._monitored.discard(check_in_id)
            await self._save()
            snapshot = self._snapshot(check_in)

        await self._best_effort(
            "notify contacts", snapshot, self.notifier.notify_contacts, snapshot, completed_message(snapshot)
        )

        logger.info(f"Jam session check-in completed: {check_in_id}")
        return snapshot

    async def cancel(self, check_in_id: UUID | str) -> CheckIn:
        """
        Cancel a scheduled or active check-in. Contacts are not notified.

        Raises:
            NotFoundError: if the id is neither scheduled nor active.
        """
        check_in_id = _coerce_id(check_in_id)

        async with self._lock:
            was_active = False
            try:
                index = self._index_of(self._scheduled, check_in_id)
                check_in = self._scheduled.pop(index)
            except NotFoundError:
                index = self._index_of(self._active, check_in_id, CheckInStatus.ACTIVE)
                check_in = self._active.pop(index)
                was_active = True

            check_in.status = CheckInStatus.CANCELLED
            self._historical.insert(0, check_in)
            self._monitored.discard(check_in_id)
            await self._save()
            snapshot = self._snapshot(check_in)

        state = "Active" if was_active else "Scheduled"
        logger.info(f"{state} jam session check-in cancelled: {check_in_id}")
        return snapshot

    async def trigger_emergency(
        self,
        check_in_id: UUID | str,
        reason: EmergencyReason = EmergencyReason.MANUAL,
    ) -> CheckIn:
        """
        Escalate an active check-in and alert every emergency contact.

        The check-in stays in the active collection with status emergency.
        The reason is recorded on the check-in and shapes the alert text.

        Raises:
            NotFoundError: if the id is not an active check-in.
        """
        check_in_id = _coerce_id(check_in_id)

        async with self._lock:
            index = self._index_of(self._active, check_in_id, CheckInStatus.ACTIVE)
            check_in = self._active[index]
            check_in.status = CheckInStatus.EMERGENCY
            check_in.emergency_reason = reason
            self._monitored.discard(check_in_id)
            await self._save()
            snapshot = self._snapshot(check_in)

        await self._best_effort("send emergency alert", snapshot, self.notifier.send_emergency_alert, snapshot)

        logger.warning(f"Emergency triggered for jam session check-in: {check_in_id} ({reason.value})")
        return snapshot

    # Monitoring

    async def sweep(self) -> None:
        """
        Run one monitoring tick over every monitored check-in.

        Past the deadline, contacts get a single overdue warning; the
        overdue_notified_at mark suppresses it on later ticks. Past the
        deadline plus the grace period, the check-in is escalated. Each
        warning and escalation re-checks that the check-in is still active
        and monitored, since earlier notifications may have let a complete
        or cancel run in between.
        """
        now = self.clock()
        overdue: list[CheckIn] = []
        escalate: list[UUID] = []

        async with self._lock:
            for check_in in self._active:
                if check_in.id not in self._monitored or check_in.status != CheckInStatus.ACTIVE:
                    continue
                if not check_in.is_overdue(now):
                    continue

                if check_in.overdue_notified_at is None:
                    logger.warning(f"Jam session check-in overdue: {check_in.id}")
                    check_in.overdue_notified_at = now
                    overdue.append(self._snapshot(check_in))

                if now - check_in.check_in_deadline > self.grace_period:
                    escalate.append(check_in.id)

            if overdue:
                await self._save()

        for snapshot in overdue:
            async with self._lock:
                still_active = self._is_monitored_active(snapshot.id)
            if not still_active:
                logger.debug(f"Check-in {snapshot.id} left active before overdue warning, skipping")
                continue
            await self._best_effort(
                "notify contacts", snapshot, self.notifier.notify_contacts, snapshot, overdue_message(snapshot)
            )

        for check_in_id in escalate:
            async with self._lock:
                still_active = self._is_monitored_active(check_in_id)
            if not still_active:
                logger.debug(f"Check-in {check_in_id} left active before escalation, skipping")
                continue
            try:
                await self.trigger_emergency(check_in_id, EmergencyReason.MISSED_CHECK_IN)
            except NotFoundError:
                logger.debug(f"Check-in {check_in_id} left active before escalation, skipping")

    # Internals

    def _is_monitored_active(self, check_in_id: UUID) -> bool:
        if check_in_id not in self._monitored:
            return False
        try:
            self._index_of(self._active, check_in_id, CheckInStatus.ACTIVE)
        except NotFoundError:
            return False
        return True

    @staticmethod
    def _snapshot(check_in: CheckIn) -> CheckIn:
        return check_in.model_copy(deep=True)

    @staticmethod
    def _index_of(
        collection: list[CheckIn],
        check_in_id: UUID,
        status: CheckInStatus | None = None,
    ) -> int:
        for index, check_in in enumerate(collection):
            if check_in.id == check_in_id and (status is None or check_in.status == status):
                return index
        raise NotFoundError(check_in_id)

    async def _save(self) -> None:
        try:
            await asyncio.to_thread(self.store.save_all, self._scheduled, self._active, self._historical)
        except Exception:
            logger.exception("Failed to save check-ins")

    async def _best_effort(self, action: str, check_in: CheckIn, func, *args) -> None:
        try:
            await func(*args)
        except Exception as e:
            logger.error(f"Failed to {action} for check-in {check_in.id}: {e}")
