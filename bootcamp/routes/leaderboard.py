"""
Leaderboard API Routes
"""

from fastapi import APIRouter, Depends, HTTPException, Path, status

from bootcamp.domain import BootcampError
from bootcamp.models.api.session_response import LeaderboardEntryResponse, LeaderboardResponse
from bootcamp.routes.dependencies import get_application, http_error_for
from bootcamp.services.application import BootcampApplication

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("/{year}/{month}", response_model=LeaderboardResponse)
async def get_leaderboard(
    year: int = Path(..., ge=2000, le=9999),
    month: int = Path(..., ge=1, le=12),
    application: BootcampApplication = Depends(get_application),
):
    """Monthly attendance ranking, most attendances first."""
    try:
        leaderboard = await application.leaderboard(year, month)
    except BootcampError as e:
        raise http_error_for(e)
    return LeaderboardResponse.from_domain(leaderboard)


@router.get("/{year}/{month}/{participant}", response_model=LeaderboardEntryResponse)
async def get_leaderboard_entry(
    participant: str,
    year: int = Path(..., ge=2000, le=9999),
    month: int = Path(..., ge=1, le=12),
    application: BootcampApplication = Depends(get_application),
):
    """One participant's position for the month."""
    try:
        leaderboard = await application.leaderboard(year, month)
    except BootcampError as e:
        raise http_error_for(e)

    entry = leaderboard.entry_for(participant)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No attendances for {participant} in {year}-{month:02d}",
        )
    return LeaderboardEntryResponse(
        rank=entry.rank, participant=entry.participant, attendances=entry.attendances
    )
