"""
Session API Routes
Administrative pass-throughs plus join/quit endpoints for chat integrations.
"""

from fastapi import APIRouter, Depends, Response, status

from bootcamp.domain import BootcampError
from bootcamp.infrastructure.observability.logging import get_logger
from bootcamp.models.api.session_request import (
    DateMembershipRequest,
    MembershipRequest,
    SessionUpdateRequest,
)
from bootcamp.models.api.session_response import (
    MembershipResponse,
    ReconcileResponse,
    SessionResponse,
)
from bootcamp.routes.dependencies import get_application, http_error_for
from bootcamp.services.application import BootcampApplication
from bootcamp.services.membership_service import MembershipResult

logger = get_logger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _membership_response(result: MembershipResult) -> MembershipResponse:
    return MembershipResponse(
        changed=result.changed, session=SessionResponse.from_domain(result.session)
    )


@router.get("", response_model=list[SessionResponse])
async def list_sessions(application: BootcampApplication = Depends(get_application)):
    """All sessions, oldest first."""
    try:
        sessions = await application.sessions()
    except BootcampError as e:
        logger.error("Error listing sessions", error=str(e))
        raise http_error_for(e)
    return [SessionResponse.from_domain(s) for s in sessions]


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_sessions(application: BootcampApplication = Depends(get_application)):
    """Run reconciliation now instead of waiting for the next tick."""
    try:
        result = await application.on_tick()
    except BootcampError as e:
        logger.error("Manual reconcile failed", error=str(e))
        raise http_error_for(e)

    return ReconcileResponse(
        created=[SessionResponse.from_domain(s) for s in result.created],
        skipped_count=len(result.skipped),
        errors=result.errors,
    )


@router.post("/join-by-date", response_model=MembershipResponse)
async def join_session_by_date(
    body: DateMembershipRequest, application: BootcampApplication = Depends(get_application)
):
    """Join the session on a date (or the next session when no date is given)."""
    try:
        result = await application.membership.join(body.user_id, date=body.date)
    except BootcampError as e:
        logger.info("Join by date rejected", user_id=body.user_id, date=body.date, error=str(e))
        raise http_error_for(e)
    return _membership_response(result)


@router.post("/quit-by-date", response_model=MembershipResponse)
async def quit_session_by_date(
    body: DateMembershipRequest, application: BootcampApplication = Depends(get_application)
):
    try:
        result = await application.membership.quit(body.user_id, date=body.date)
    except BootcampError as e:
        logger.info("Quit by date rejected", user_id=body.user_id, date=body.date, error=str(e))
        raise http_error_for(e)
    return _membership_response(result)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, application: BootcampApplication = Depends(get_application)):
    try:
        session = await application.get_session(session_id)
    except BootcampError as e:
        raise http_error_for(e)
    return SessionResponse.from_domain(session)


@router.put("/{session_id}", response_model=SessionResponse)
async def put_session(
    session_id: str,
    body: SessionUpdateRequest,
    application: BootcampApplication = Depends(get_application),
):
    """Replace a session verbatim. No capacity or template checks are applied."""
    try:
        session = await application.put_session(session_id, body.to_session(session_id))
    except BootcampError as e:
        logger.error("Error replacing session", session_id=session_id, error=str(e))
        raise http_error_for(e)
    return SessionResponse.from_domain(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str, application: BootcampApplication = Depends(get_application)
):
    try:
        await application.delete_session(session_id)
    except BootcampError as e:
        logger.error("Error deleting session", session_id=session_id, error=str(e))
        raise http_error_for(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/join", response_model=MembershipResponse)
async def join_session(
    session_id: str,
    body: MembershipRequest,
    application: BootcampApplication = Depends(get_application),
):
    """Join a session. Joining twice is a no-op (``changed`` is false)."""
    try:
        result = await application.membership.join(body.user_id, session_id=session_id)
    except BootcampError as e:
        logger.info("Join rejected", session_id=session_id, user_id=body.user_id, error=str(e))
        raise http_error_for(e)
    return _membership_response(result)


@router.post("/{session_id}/quit", response_model=MembershipResponse)
async def quit_session(
    session_id: str,
    body: MembershipRequest,
    application: BootcampApplication = Depends(get_application),
):
    try:
        result = await application.membership.quit(body.user_id, session_id=session_id)
    except BootcampError as e:
        logger.info("Quit rejected", session_id=session_id, user_id=body.user_id, error=str(e))
        raise http_error_for(e)
    return _membership_response(result)
