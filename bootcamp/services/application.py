"""
Application container.

Wires repositories, presenter and the three engines together and exposes
the administrative pass-throughs used by the HTTP control plane.
"""

from datetime import tzinfo

from bootcamp.config import Settings
from bootcamp.domain import (
    BOOTCAMP_SCHEDULES,
    Leaderboard,
    Schedule,
    Session,
    SessionNotFoundError,
    WeeklyTemplate,
)
from bootcamp.domain.local_date import Clock
from bootcamp.infrastructure.observability.logging import get_logger
from bootcamp.repositories.contracts import ScheduleRepository, SessionRepository
from bootcamp.services.leaderboard_service import LeaderboardService
from bootcamp.services.locks import KeyedLock
from bootcamp.services.membership_service import MembershipService
from bootcamp.services.presenter import LoggingSessionPresenter, SessionPresenter
from bootcamp.services.scheduling_service import (
    DEFAULT_EARLY_SLOT_CUTOFF_HOUR,
    ReconcileResult,
    SchedulingService,
)

logger = get_logger(__name__)


class BootcampApplication:
    def __init__(
        self,
        session_repository: SessionRepository,
        schedule_repository: ScheduleRepository,
        presenter: SessionPresenter | None = None,
        *,
        template: WeeklyTemplate = BOOTCAMP_SCHEDULES,
        session_limit: int | None = None,
        schedules_enabled: bool = True,
        early_slot_cutoff_hour: int = DEFAULT_EARLY_SLOT_CUTOFF_HOUR,
        tz: tzinfo | None = None,
        clock: Clock | None = None,
    ):
        self.session_repository = session_repository
        self.schedule_repository = schedule_repository
        self.presenter = presenter or LoggingSessionPresenter()
        self.schedules_enabled = schedules_enabled
        self.session_locks = KeyedLock()

        self.scheduling = SchedulingService(
            session_repository,
            schedule_repository,
            self.presenter,
            template=template,
            session_limit=session_limit,
            early_slot_cutoff_hour=early_slot_cutoff_hour,
            session_locks=self.session_locks,
            tz=tz,
            clock=clock,
        )
        self.membership = MembershipService(
            session_repository,
            schedule_repository,
            self.presenter,
            session_locks=self.session_locks,
            schedules_enabled=schedules_enabled,
            tz=tz,
            clock=clock,
        )
        self.leaderboards = LeaderboardService(session_repository)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_repository: SessionRepository,
        schedule_repository: ScheduleRepository,
        presenter: SessionPresenter | None = None,
    ) -> "BootcampApplication":
        return cls(
            session_repository,
            schedule_repository,
            presenter,
            session_limit=settings.session_limit(),
            schedules_enabled=settings.ENABLE_SCHEDULES,
            early_slot_cutoff_hour=settings.EARLY_SLOT_CUTOFF_HOUR,
            tz=settings.tzinfo(),
        )

    async def start(self) -> ReconcileResult:
        """Purge subscriptions when they are disabled, then catch up on due sessions."""
        if not self.schedules_enabled:
            await self.purge_schedules()
        return await self.on_tick()

    async def on_tick(self) -> ReconcileResult:
        return await self.scheduling.reconcile()

    async def purge_schedules(self) -> int:
        schedules = await self.schedule_repository.load_all()
        for schedule in schedules:
            await self.schedule_repository.delete(schedule.user)
        if schedules:
            logger.info("Purged existing schedules", count=len(schedules))
        return len(schedules)

    # ------------------------------------------------------------------
    # Administrative pass-throughs
    # ------------------------------------------------------------------

    async def sessions(self) -> list[Session]:
        return sorted(await self.session_repository.load_all(), key=Session.sort_key)

    async def get_session(self, session_id: str) -> Session:
        session = await self.session_repository.load(session_id)
        if session is None:
            raise SessionNotFoundError(f"Unknown session {session_id}", session_id=session_id)
        return session

    async def put_session(self, session_id: str, session: Session) -> Session:
        """Replace (or create) a session verbatim under its lock."""
        session.session_id = session_id
        async with self.session_locks.hold(session_id):
            await self.session_repository.save(session)
        logger.info("Session replaced", session_id=session_id)
        return session

    async def delete_session(self, session_id: str) -> None:
        async with self.session_locks.hold(session_id):
            await self.session_repository.delete(session_id)
        logger.info("Session deleted", session_id=session_id)

    async def schedules(self) -> list[Schedule]:
        return sorted(await self.schedule_repository.load_all(), key=lambda s: s.user)

    async def leaderboard(self, year: int, month: int) -> Leaderboard:
        return await self.leaderboards.leaderboard(year, month)
