"""
Monthly attendance leaderboard.

Ordering: attendances descending, then participant id ascending, so equal
inputs always produce the same ranking. Ranks are positions (1..n).
"""

from collections import Counter
from collections.abc import Iterable

from bootcamp.domain import Leaderboard, LeaderboardEntry, Session
from bootcamp.infrastructure.observability.logging import get_logger
from bootcamp.repositories.contracts import SessionRepository

logger = get_logger(__name__)


def compute_leaderboard(sessions: Iterable[Session], year: int, month: int) -> Leaderboard:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be within 1..12, got {month}")

    counts: Counter[str] = Counter()
    for session in sessions:
        if session.date.in_month(year, month):
            # participants are duplicate-free, one attendance per session
            counts.update(set(session.participants))

    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    entries = tuple(
        LeaderboardEntry(rank=position, participant=participant, attendances=count)
        for position, (participant, count) in enumerate(ranked, 1)
    )
    return Leaderboard(year=year, month=month, entries=entries)


class LeaderboardService:
    """Read-only: loads all sessions and ranks one month."""

    def __init__(self, session_repository: SessionRepository):
        self.session_repository = session_repository

    async def leaderboard(self, year: int, month: int) -> Leaderboard:
        sessions = await self.session_repository.load_all()
        board = compute_leaderboard(sessions, year, month)
        logger.debug(
            "Leaderboard computed",
            year=year,
            month=month,
            participants=len(board.entries),
            attendances=board.total_attendances,
        )
        return board
