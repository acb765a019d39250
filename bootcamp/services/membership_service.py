"""
Membership service: join/quit a session and manage weekday subscriptions.

Every session mutation runs load -> mutate -> persist -> notify inside a
per-session critical section so two simultaneous joins cannot drop one
another. Repeated joins and quits are no-ops, not errors.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo

from bootcamp.domain import (
    CapacityExceededError,
    LocalDate,
    Schedule,
    ScheduleNotFoundError,
    SchedulesDisabledError,
    Session,
    SessionNotFoundError,
    Weekday,
    parse_date_reference,
)
from bootcamp.domain.local_date import Clock
from bootcamp.infrastructure.observability.logging import get_logger, log_membership_change
from bootcamp.repositories.contracts import ScheduleRepository, SessionRepository
from bootcamp.services.locks import KeyedLock
from bootcamp.services.presenter import SessionPresenter

logger = get_logger(__name__)


@dataclass(slots=True)
class MembershipResult:
    session: Session
    changed: bool


class MembershipService:
    def __init__(
        self,
        session_repository: SessionRepository,
        schedule_repository: ScheduleRepository,
        presenter: SessionPresenter,
        *,
        session_locks: KeyedLock | None = None,
        schedules_enabled: bool = True,
        tz: tzinfo | None = None,
        clock: Clock | None = None,
    ):
        self.session_repository = session_repository
        self.schedule_repository = schedule_repository
        self.presenter = presenter
        self.session_locks = session_locks or KeyedLock()
        self.schedules_enabled = schedules_enabled
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(self.tz))

    # ------------------------------------------------------------------
    # Session resolution
    # ------------------------------------------------------------------

    def _local_now(self) -> tuple[LocalDate, tuple[LocalDate, int, int]]:
        now = self.clock()
        if now.tzinfo is not None and self.tz is not None:
            now = now.astimezone(self.tz)
        today = LocalDate.from_datetime(now)
        return today, (today, now.hour, now.minute)

    async def resolve(self, *, session_id: str | None = None, date: str | None = None) -> Session:
        """
        Find the session a user action refers to.

        Args:
            session_id: Explicit session id (takes precedence)
            date: Date reference such as ``tomorrow``, ``tue`` or ``2025-06-03``.
                When neither is given the next upcoming session is used.

        Raises:
            SessionNotFoundError: If nothing matches
            InvalidDateError: If the date reference cannot be parsed
        """
        if session_id:
            session = await self.session_repository.load(session_id)
            if session is None:
                raise SessionNotFoundError(f"Unknown session {session_id}", session_id=session_id)
            return session

        today, now_key = self._local_now()
        sessions = sorted(await self.session_repository.load_all(), key=Session.sort_key)

        if date is None:
            upcoming = [s for s in sessions if s.start_key() >= now_key]
            if not upcoming:
                raise SessionNotFoundError("No upcoming session")
            return upcoming[0]

        target = parse_date_reference(date, today)
        on_date = [s for s in sessions if s.date == target]
        if not on_date:
            raise SessionNotFoundError(f"No session on {target.to_iso()}")

        if target == today:
            upcoming = [s for s in on_date if s.start_key() >= now_key]
            # Everything today has started: the latest one is the one meant
            return upcoming[0] if upcoming else on_date[-1]
        return on_date[0]

    # ------------------------------------------------------------------
    # Join / quit
    # ------------------------------------------------------------------

    async def join(
        self, user_id: str, *, session_id: str | None = None, date: str | None = None
    ) -> MembershipResult:
        """
        Add ``user_id`` to a session.

        Raises:
            SessionNotFoundError: If the reference resolves to nothing
            CapacityExceededError: If the session is full; nothing is changed
            PersistenceError: If the repository fails
        """
        target = await self.resolve(session_id=session_id, date=date)

        async with self.session_locks.hold(target.session_id):
            session = await self._reload(target.session_id)

            if session.has_participant(user_id):
                log_membership_change("join", session.session_id, user_id, changed=False)
                return MembershipResult(session, changed=False)

            if session.is_full():
                logger.info(
                    "Join rejected, session full",
                    session_id=session.session_id,
                    user_id=user_id,
                    limit=session.limit,
                )
                raise CapacityExceededError(session.session_id, session.limit)

            session.participants.append(user_id)
            await self.session_repository.save(session)
            await self.presenter.update(session)

        log_membership_change("join", session.session_id, user_id, changed=True)
        return MembershipResult(session, changed=True)

    async def quit(
        self, user_id: str, *, session_id: str | None = None, date: str | None = None
    ) -> MembershipResult:
        """Remove ``user_id`` from a session; absent users are a no-op."""
        target = await self.resolve(session_id=session_id, date=date)

        async with self.session_locks.hold(target.session_id):
            session = await self._reload(target.session_id)

            if not session.has_participant(user_id):
                log_membership_change("quit", session.session_id, user_id, changed=False)
                return MembershipResult(session, changed=False)

            session.participants.remove(user_id)
            await self.session_repository.save(session)
            await self.presenter.update(session)

        log_membership_change("quit", session.session_id, user_id, changed=True)
        return MembershipResult(session, changed=True)

    async def _reload(self, session_id: str) -> Session:
        session = await self.session_repository.load(session_id)
        if session is None:
            # Deleted between resolution and locking
            raise SessionNotFoundError(f"Unknown session {session_id}", session_id=session_id)
        return session

    # ------------------------------------------------------------------
    # Weekday subscriptions
    # ------------------------------------------------------------------

    async def subscribe(self, weekday: str | int | Weekday, user_id: str) -> Schedule:
        """
        Make ``user_id`` join every future session on ``weekday``.

        Replaces any previous subscription. Sessions that already exist are
        left untouched.

        Raises:
            SchedulesDisabledError: If subscriptions are switched off
            InvalidWeekdayError: If the weekday cannot be parsed
        """
        if not self.schedules_enabled:
            raise SchedulesDisabledError()

        schedule = Schedule(user=user_id, weekday=Weekday.parse(weekday))
        await self.schedule_repository.save(schedule)
        logger.info("Schedule saved", user_id=user_id, weekday=schedule.weekday.label)
        return schedule

    async def unsubscribe(self, weekday: str | int | Weekday, user_id: str) -> bool:
        """
        Drop the user's subscription to ``weekday``.

        Returns:
            True if a subscription was deleted, False if there was none for that weekday
        """
        parsed = Weekday.parse(weekday)
        existing = await self.schedule_repository.load_by_user(user_id)
        if existing is None or existing.weekday != parsed:
            logger.debug("No matching schedule to remove", user_id=user_id, weekday=parsed.label)
            return False

        await self.schedule_repository.delete(user_id)
        logger.info("Schedule removed", user_id=user_id, weekday=parsed.label)
        return True

    async def schedule_for(self, user_id: str) -> Schedule:
        schedule = await self.schedule_repository.load_by_user(user_id)
        if schedule is None:
            raise ScheduleNotFoundError(user_id)
        return schedule
