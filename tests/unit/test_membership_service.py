import asyncio

import pytest

from bootcamp.domain import (
    CapacityExceededError,
    InvalidDateError,
    InvalidWeekdayError,
    LocalDate,
    Schedule,
    ScheduleNotFoundError,
    SchedulesDisabledError,
    Session,
    SessionNotFoundError,
    Weekday,
)
from bootcamp.repositories.memory import InMemorySessionRepository

MONDAY = LocalDate(2025, 6, 2)
TUESDAY = LocalDate(2025, 6, 3)


class SlowSessionRepository(InMemorySessionRepository):
    """Yields to the event loop between read and write to expose lost updates."""

    async def load(self, session_id):
        session = await super().load(session_id)
        await asyncio.sleep(0)
        return session

    async def save(self, session):
        await asyncio.sleep(0)
        await super().save(session)


async def _day(session_repository):
    """Monday 07:00 and 17:00 plus Tuesday 07:00."""
    sessions = [
        Session(session_id="mon-am", date=MONDAY, hour=7, minute=0),
        Session(session_id="mon-pm", date=MONDAY, hour=17, minute=0),
        Session(session_id="tue-am", date=TUESDAY, hour=7, minute=0),
    ]
    for session in sessions:
        await session_repository.save(session)


@pytest.mark.asyncio
async def test_join_adds_participant_and_refreshes_presentation(
    application, session_repository, presenter
):
    await session_repository.save(Session(session_id="s1", date=MONDAY, hour=17, minute=0))

    result = await application.membership.join("U1", session_id="s1")

    assert result.changed is True
    assert result.session.participants == ["U1"]
    assert (await session_repository.load("s1")).participants == ["U1"]
    assert [s.session_id for s in presenter.updated] == ["s1"]


@pytest.mark.asyncio
async def test_join_twice_is_a_no_op(application, session_repository, presenter):
    await session_repository.save(Session(session_id="s1", date=MONDAY, hour=17, minute=0))

    await application.membership.join("U1", session_id="s1")
    again = await application.membership.join("U1", session_id="s1")

    assert again.changed is False
    assert (await session_repository.load("s1")).participants == ["U1"]
    assert len(presenter.updated) == 1


@pytest.mark.asyncio
async def test_quit_when_absent_is_a_no_op(application, session_repository, presenter):
    await session_repository.save(
        Session(session_id="s1", date=MONDAY, hour=17, minute=0, participants=["U2"])
    )

    result = await application.membership.quit("U1", session_id="s1")

    assert result.changed is False
    assert result.session.participants == ["U2"]
    assert presenter.updated == []


@pytest.mark.asyncio
async def test_capacity_rejects_then_frees_a_seat(application, session_repository):
    await session_repository.save(
        Session(session_id="s1", date=MONDAY, hour=17, minute=0, participants=["A", "B"], limit=2)
    )

    with pytest.raises(CapacityExceededError) as exc_info:
        await application.membership.join("C", session_id="s1")
    assert exc_info.value.limit == 2
    assert (await session_repository.load("s1")).participants == ["A", "B"]

    await application.membership.quit("A", session_id="s1")
    await application.membership.join("C", session_id="s1")

    assert (await session_repository.load("s1")).participants == ["B", "C"]


@pytest.mark.asyncio
async def test_member_of_full_session_can_rejoin_without_error(application, session_repository):
    await session_repository.save(
        Session(session_id="s1", date=MONDAY, hour=17, minute=0, participants=["A"], limit=1)
    )

    result = await application.membership.join("A", session_id="s1")

    assert result.changed is False


@pytest.mark.asyncio
async def test_unknown_session_id_raises_not_found(application):
    with pytest.raises(SessionNotFoundError) as exc_info:
        await application.membership.join("U1", session_id="missing")

    assert exc_info.value.session_id == "missing"


@pytest.mark.asyncio
async def test_join_by_today_picks_next_session_of_the_day(application, session_repository):
    await _day(session_repository)

    result = await application.membership.join("U1", date="today")

    assert result.session.session_id == "mon-pm"


@pytest.mark.asyncio
async def test_join_by_today_after_last_start_picks_latest(
    application, session_repository, clock, at
):
    await _day(session_repository)
    clock.now = at(2025, 6, 2, 18)

    result = await application.membership.join("U1", date="today")

    assert result.session.session_id == "mon-pm"


@pytest.mark.asyncio
async def test_quit_by_tomorrow(application, session_repository):
    await _day(session_repository)
    await application.membership.join("U1", date="tomorrow")

    result = await application.membership.quit("U1", date="tomorrow")

    assert result.changed is True
    assert result.session.session_id == "tue-am"
    assert (await session_repository.load("tue-am")).participants == []


@pytest.mark.asyncio
async def test_join_without_reference_picks_next_upcoming(
    application, session_repository, clock, at
):
    await _day(session_repository)

    assert (await application.membership.join("U1")).session.session_id == "mon-pm"

    clock.now = at(2025, 6, 2, 18)
    assert (await application.membership.join("U1")).session.session_id == "tue-am"


@pytest.mark.asyncio
async def test_join_by_weekday_name(application, session_repository):
    await _day(session_repository)

    result = await application.membership.join("U1", date="tue")

    assert result.session.date == TUESDAY


@pytest.mark.asyncio
async def test_date_without_session_raises_not_found(application, session_repository):
    await _day(session_repository)

    with pytest.raises(SessionNotFoundError):
        await application.membership.join("U1", date="2025-06-10")


@pytest.mark.asyncio
async def test_nothing_upcoming_raises_not_found(application):
    with pytest.raises(SessionNotFoundError):
        await application.membership.join("U1")


@pytest.mark.asyncio
async def test_unparseable_date_raises(application, session_repository):
    await _day(session_repository)

    with pytest.raises(InvalidDateError):
        await application.membership.join("U1", date="someday soon")


@pytest.mark.asyncio
async def test_concurrent_joins_are_all_recorded(make_application):
    repository = SlowSessionRepository(
        [Session(session_id="s1", date=MONDAY, hour=17, minute=0)]
    )
    application = make_application(sessions=repository)
    users = [f"U{i}" for i in range(10)]

    await asyncio.gather(*(application.membership.join(u, session_id="s1") for u in users))

    assert sorted((await repository.load("s1")).participants) == sorted(users)
    assert len(application.session_locks) == 0


@pytest.mark.asyncio
async def test_concurrent_joins_never_exceed_capacity(make_application):
    repository = SlowSessionRepository(
        [Session(session_id="s1", date=MONDAY, hour=17, minute=0, limit=3)]
    )
    application = make_application(sessions=repository)

    results = await asyncio.gather(
        *(application.membership.join(f"U{i}", session_id="s1") for i in range(6)),
        return_exceptions=True,
    )

    rejected = [r for r in results if isinstance(r, CapacityExceededError)]
    assert len(rejected) == 3
    assert len((await repository.load("s1")).participants) == 3


@pytest.mark.asyncio
async def test_subscribe_replaces_previous_weekday(application, schedule_repository):
    await application.membership.subscribe("monday", "U1")
    schedule = await application.membership.subscribe("Thu", "U1")

    assert schedule.weekday is Weekday.THURSDAY
    assert await schedule_repository.load_all() == [Schedule(user="U1", weekday=Weekday.THURSDAY)]


@pytest.mark.asyncio
async def test_subscribe_rejects_unknown_weekday(application, schedule_repository):
    with pytest.raises(InvalidWeekdayError):
        await application.membership.subscribe("funday", "U1")

    assert await schedule_repository.load_all() == []


@pytest.mark.asyncio
async def test_subscribe_when_disabled_raises(make_application, schedule_repository):
    application = make_application(schedules_enabled=False)

    with pytest.raises(SchedulesDisabledError):
        await application.membership.subscribe("monday", "U1")

    assert await schedule_repository.load_all() == []


@pytest.mark.asyncio
async def test_unsubscribe_only_removes_matching_weekday(application, schedule_repository):
    await application.membership.subscribe("tuesday", "U1")

    assert await application.membership.unsubscribe("monday", "U1") is False
    assert await schedule_repository.load_by_user("U1") is not None

    assert await application.membership.unsubscribe("tue", "U1") is True
    assert await schedule_repository.load_by_user("U1") is None

    assert await application.membership.unsubscribe("tue", "U1") is False


@pytest.mark.asyncio
async def test_unsubscribe_keeps_existing_memberships(
    application, session_repository, schedule_repository, at
):
    await application.membership.subscribe("tuesday", "U1")
    await application.scheduling.reconcile(at(2025, 6, 2, 9))

    await application.membership.unsubscribe("tuesday", "U1")

    morning = next(s for s in await session_repository.load_all() if s.date == TUESDAY)
    assert morning.participants == ["U1"]


@pytest.mark.asyncio
async def test_schedule_for_unknown_user_raises(application):
    with pytest.raises(ScheduleNotFoundError):
        await application.membership.schedule_for("nobody")


@pytest.mark.asyncio
async def test_schedule_for_returns_subscription(application):
    await application.membership.subscribe(3, "U1")

    schedule = await application.membership.schedule_for("U1")

    assert schedule.weekday is Weekday.WEDNESDAY
