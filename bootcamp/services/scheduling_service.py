"""
Scheduling service: materializes dated sessions from the weekly template.

``reconcile`` is safe to call any number of times. It only ever creates the
sessions that are due and missing; it never deletes or duplicates one.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from bootcamp.domain import (
    BOOTCAMP_SCHEDULES,
    LocalDate,
    Schedule,
    Session,
    TemplateSlot,
    WeeklyTemplate,
    new_session_id,
)
from bootcamp.domain.local_date import Clock
from bootcamp.infrastructure.observability.logging import get_logger
from bootcamp.repositories.contracts import ScheduleRepository, SessionRepository
from bootcamp.services.locks import KeyedLock
from bootcamp.services.presenter import SessionPresenter

logger = get_logger(__name__)

DEFAULT_EARLY_SLOT_CUTOFF_HOUR = 12


@dataclass(frozen=True, slots=True)
class DueOccurrence:
    """A template slot pinned to the date it must be materialized for."""

    slot: TemplateSlot
    date: LocalDate

    @property
    def key(self) -> tuple[LocalDate, int, int]:
        return (self.date, self.slot.hour, self.slot.minute)

    def describe(self) -> str:
        return f"{self.date.to_iso()} {self.slot}"


def due_occurrences(
    template: Iterable[TemplateSlot],
    today: LocalDate,
    early_slot_cutoff_hour: int = DEFAULT_EARLY_SLOT_CUTOFF_HOUR,
) -> list[DueOccurrence]:
    """
    Occurrences inside the creation horizon, in template order.

    Today's slots are always due. Tomorrow's slots are due only when they
    start before ``early_slot_cutoff_hour``, so an early morning session is
    announced the day before while evening sessions wait for their own day.
    """
    due: list[DueOccurrence] = []
    seen: set[tuple[LocalDate, int, int]] = set()

    for slot in template:
        days = today.days_until_next(slot.weekday)
        if days == 0 or (days == 1 and slot.hour < early_slot_cutoff_hour):
            occurrence = DueOccurrence(slot=slot, date=today.plus_days(days))
            if occurrence.key not in seen:
                seen.add(occurrence.key)
                due.append(occurrence)

    return due


class ReconcileResult:
    """Outcome of one reconciliation run."""

    def __init__(self, now: datetime):
        self.now = now
        self.created: list[Session] = []
        self.skipped: list[DueOccurrence] = []
        self.announced: list[Session] = []
        self.errors: list[dict] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def record_created(self, session: Session):
        self.created.append(session)
        logger.info(
            "Session materialized",
            session_id=session.session_id,
            date=session.date.to_iso(),
            time=session.time_label,
            auto_joined=len(session.participants),
        )

    def record_skipped(self, occurrence: DueOccurrence):
        self.skipped.append(occurrence)
        logger.debug("Session already exists", occurrence=occurrence.describe())

    def record_announced(self, session: Session):
        self.announced.append(session)
        logger.info(
            "Session announcement retried",
            session_id=session.session_id,
            date=session.date.to_iso(),
            time=session.time_label,
        )

    def record_failure(self, occurrence: DueOccurrence, error: Exception, stage: str):
        self.errors.append(
            {
                "occurrence": occurrence.describe(),
                "stage": stage,
                "error": str(error),
                "error_type": type(error).__name__,
            }
        )
        logger.error(
            "Session reconciliation failed for slot",
            occurrence=occurrence.describe(),
            stage=stage,
            error=str(error),
            error_type=type(error).__name__,
        )

    def to_dict(self) -> dict:
        return {
            "now": self.now.isoformat(),
            "created": [s.session_id for s in self.created],
            "created_count": len(self.created),
            "skipped_count": len(self.skipped),
            "announced_count": len(self.announced),
            "errors": list(self.errors),
            "errors_count": len(self.errors),
        }


class SlotReconcileError(Exception):
    """Wraps the failure of a single slot together with the step it failed in."""

    def __init__(self, stage: str, error: Exception):
        super().__init__(str(error))
        self.stage = stage
        self.error = error


class SchedulingService:
    """
    Creates the sessions the weekly template calls for.

    The template is injected once and treated as read-only. Runs are
    serialized; concurrent callers wait for the previous run to finish.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        schedule_repository: ScheduleRepository,
        presenter: SessionPresenter,
        *,
        template: WeeklyTemplate = BOOTCAMP_SCHEDULES,
        session_limit: int | None = None,
        early_slot_cutoff_hour: int = DEFAULT_EARLY_SLOT_CUTOFF_HOUR,
        session_locks: KeyedLock | None = None,
        tz: tzinfo | None = None,
        clock: Clock | None = None,
    ):
        self.session_repository = session_repository
        self.schedule_repository = schedule_repository
        self.presenter = presenter
        self.template: WeeklyTemplate = tuple(template)
        self.session_limit = session_limit
        self.early_slot_cutoff_hour = early_slot_cutoff_hour
        self.session_locks = session_locks or KeyedLock()
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(self.tz))
        self._lock = asyncio.Lock()
        # Saved sessions whose announcement failed; retried while still in the horizon
        self._unannounced: set[str] = set()

    async def reconcile(self, now: datetime | None = None) -> ReconcileResult:
        """
        Materialize every due, missing session.

        Existing sessions whose announcement failed in an earlier run of this
        process are presented again while their slot is still due.

        Args:
            now: Reference instant (defaults to the injected clock)

        Returns:
            ReconcileResult with created sessions and per-slot errors

        Raises:
            PersistenceError: If the initial snapshot cannot be loaded
        """
        now = now or self.clock()
        result = ReconcileResult(now)

        async with self._lock:
            today = LocalDate.from_datetime(now, self.tz)
            due = due_occurrences(self.template, today, self.early_slot_cutoff_hour)
            if not due:
                logger.debug("No template slots in horizon", today=today.to_iso())
                return result

            existing = await self.session_repository.load_all()
            schedules: list[Schedule] | None = None

            for occurrence in due:
                match = next((s for s in existing if s.matches(*occurrence.key)), None)
                if match is not None:
                    if match.session_id in self._unannounced:
                        await self._retry_announcement(match.session_id, occurrence, result)
                    else:
                        result.record_skipped(occurrence)
                    continue

                if schedules is None:
                    schedules = await self.schedule_repository.load_all()

                try:
                    session = await self._materialize(occurrence, schedules)
                except SlotReconcileError as e:
                    result.record_failure(occurrence, e.error, e.stage)
                    continue

                existing.append(session)
                result.record_created(session)

        logger.info(
            "Reconciliation finished",
            today=today.to_iso(),
            **{k: v for k, v in result.to_dict().items() if k != "errors"},
        )
        return result

    async def _materialize(self, occurrence: DueOccurrence, schedules: list[Schedule]) -> Session:
        session = Session(
            session_id=new_session_id(),
            date=occurrence.date,
            hour=occurrence.slot.hour,
            minute=occurrence.slot.minute,
            participants=[],
            limit=self.session_limit,
        )
        self._auto_join(session, schedules)

        async with self.session_locks.hold(session.session_id):
            try:
                await self.session_repository.save(session)
            except Exception as e:
                raise SlotReconcileError("save", e) from e

        return await self._announce(session)

    async def _announce(self, session: Session) -> Session:
        """
        Present a saved session and store its handle.

        ``present`` runs outside the session lock, so members may join or
        quit meanwhile. The handle is written onto a fresh copy under the
        lock; the returned session is that stored state.
        """
        try:
            handle = await self.presenter.present(session)
        except Exception as e:
            self._unannounced.add(session.session_id)
            raise SlotReconcileError("present", e) from e

        self._unannounced.discard(session.session_id)
        if not handle:
            return session

        try:
            async with self.session_locks.hold(session.session_id):
                current = await self.session_repository.load(session.session_id)
                if current is None:
                    logger.warning(
                        "Session deleted before its handle was stored",
                        session_id=session.session_id,
                    )
                    session.presentation_handle = handle
                    return session
                current.presentation_handle = handle
                await self.session_repository.save(current)
        except Exception as e:
            raise SlotReconcileError("save_handle", e) from e

        return current

    async def _retry_announcement(
        self, session_id: str, occurrence: DueOccurrence, result: ReconcileResult
    ):
        try:
            session = await self.session_repository.load(session_id)
        except Exception as e:
            result.record_failure(occurrence, e, "reload")
            return

        if session is None or session.presentation_handle:
            self._unannounced.discard(session_id)
            result.record_skipped(occurrence)
            return

        try:
            announced = await self._announce(session)
        except SlotReconcileError as e:
            result.record_failure(occurrence, e.error, e.stage)
            return
        result.record_announced(announced)

    def _auto_join(self, session: Session, schedules: list[Schedule]):
        weekday = session.date.weekday()
        for schedule in schedules:
            if schedule.weekday != weekday or session.has_participant(schedule.user):
                continue
            if session.is_full():
                logger.warning(
                    "Session full, subscriber not auto-joined",
                    session_id=session.session_id,
                    user_id=schedule.user,
                    limit=session.limit,
                )
                continue
            session.participants.append(schedule.user)
