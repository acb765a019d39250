"""
Schedule API Routes
Recurring weekday subscriptions ("join every tuesday").
"""

from fastapi import APIRouter, Depends, Response, status

from bootcamp.domain import BootcampError
from bootcamp.infrastructure.observability.logging import get_logger
from bootcamp.models.api.session_request import SubscribeRequest
from bootcamp.models.api.session_response import ScheduleResponse
from bootcamp.routes.dependencies import get_application, http_error_for
from bootcamp.services.application import BootcampApplication

logger = get_logger(__name__)

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.get("", response_model=list[ScheduleResponse])
async def list_schedules(application: BootcampApplication = Depends(get_application)):
    try:
        schedules = await application.schedules()
    except BootcampError as e:
        logger.error("Error listing schedules", error=str(e))
        raise http_error_for(e)
    return [ScheduleResponse.from_domain(s) for s in schedules]


@router.get("/{user_id}", response_model=ScheduleResponse)
async def get_schedule(user_id: str, application: BootcampApplication = Depends(get_application)):
    try:
        schedule = await application.membership.schedule_for(user_id)
    except BootcampError as e:
        raise http_error_for(e)
    return ScheduleResponse.from_domain(schedule)


@router.put("/{user_id}", response_model=ScheduleResponse)
async def subscribe(
    user_id: str,
    body: SubscribeRequest,
    application: BootcampApplication = Depends(get_application),
):
    """
    Join every future session on a weekday.

    Replaces the user's previous subscription. Existing sessions are not
    changed; use the join endpoints for those.
    """
    try:
        schedule = await application.membership.subscribe(body.weekday, user_id)
    except BootcampError as e:
        logger.info("Subscribe rejected", user_id=user_id, weekday=body.weekday, error=str(e))
        raise http_error_for(e)
    return ScheduleResponse.from_domain(schedule)


@router.delete("/{user_id}/{weekday}", status_code=status.HTTP_204_NO_CONTENT)
async def unsubscribe(
    user_id: str, weekday: str, application: BootcampApplication = Depends(get_application)
):
    try:
        await application.membership.unsubscribe(weekday, user_id)
    except BootcampError as e:
        logger.info("Unsubscribe rejected", user_id=user_id, weekday=weekday, error=str(e))
        raise http_error_for(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
