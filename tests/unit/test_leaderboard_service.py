import random

import pytest

from bootcamp.domain import LocalDate, Session
from bootcamp.services.leaderboard_service import compute_leaderboard


def _session(session_id, date, participants, hour=17):
    return Session(
        session_id=session_id,
        date=LocalDate.parse(date),
        hour=hour,
        minute=0,
        participants=list(participants),
    )


def _ranking(board):
    return [(e.rank, e.participant, e.attendances) for e in board.entries]


def test_morning_and_evening_sessions_both_count():
    sessions = [
        _session("a", "2025-06-03", ["U1", "U2"], hour=7),
        _session("b", "2025-06-03", ["U1"], hour=17),
    ]

    board = compute_leaderboard(sessions, 2025, 6)

    assert _ranking(board) == [(1, "U1", 2), (2, "U2", 1)]


def test_total_matches_participations_in_month():
    sessions = [
        _session("a", "2025-06-02", ["U1", "U2", "U3"]),
        _session("b", "2025-06-03", ["U2"]),
        _session("c", "2025-06-30", ["U3", "U1"]),
    ]

    assert compute_leaderboard(sessions, 2025, 6).total_attendances == 6


def test_other_months_are_ignored():
    sessions = [
        _session("a", "2025-05-31", ["U1"]),
        _session("b", "2025-06-01", ["U2"]),
        _session("c", "2025-07-01", ["U1"]),
        _session("d", "2024-06-15", ["U1"]),
    ]

    assert _ranking(compute_leaderboard(sessions, 2025, 6)) == [(1, "U2", 1)]


def test_ties_break_by_participant_id_with_positional_ranks():
    sessions = [
        _session("a", "2025-06-02", ["zoe", "adam", "mia"]),
        _session("b", "2025-06-03", ["mia"]),
    ]

    assert _ranking(compute_leaderboard(sessions, 2025, 6)) == [
        (1, "mia", 2),
        (2, "adam", 1),
        (3, "zoe", 1),
    ]


def test_ranking_does_not_depend_on_input_order():
    sessions = [
        _session(str(i), f"2025-06-{i + 1:02d}", [f"U{j}" for j in range(i % 5 + 1)])
        for i in range(20)
    ]
    expected = compute_leaderboard(sessions, 2025, 6)

    shuffled = list(sessions)
    random.Random(7).shuffle(shuffled)

    assert compute_leaderboard(shuffled, 2025, 6) == expected


def test_empty_month_yields_empty_board():
    board = compute_leaderboard([_session("a", "2025-06-02", ["U1"])], 2025, 8)

    assert board.entries == ()
    assert board.total_attendances == 0


@pytest.mark.parametrize("month", [0, 13])
def test_invalid_month_rejected(month):
    with pytest.raises(ValueError):
        compute_leaderboard([], 2025, month)


def test_entry_for_participant():
    board = compute_leaderboard([_session("a", "2025-06-02", ["U1", "U2"])], 2025, 6)

    assert board.entry_for("U2").rank == 2
    assert board.entry_for("U9") is None


@pytest.mark.asyncio
async def test_service_reads_without_mutating(application, session_repository):
    await session_repository.save(_session("a", "2025-06-02", ["U1", "U2"]))
    await session_repository.save(_session("b", "2025-06-03", ["U2"]))
    before = [s.to_dict() for s in await session_repository.load_all()]

    board = await application.leaderboard(2025, 6)

    assert _ranking(board) == [(1, "U2", 2), (2, "U1", 1)]
    assert [s.to_dict() for s in await session_repository.load_all()] == before
