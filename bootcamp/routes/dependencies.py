"""
Shared route dependencies and domain error translation.
"""

from fastapi import HTTPException, Request, status

from bootcamp.domain import (
    BootcampError,
    CapacityExceededError,
    InvalidDateError,
    InvalidWeekdayError,
    NotFoundError,
    PersistenceError,
    SchedulesDisabledError,
)
from bootcamp.services.application import BootcampApplication

_STATUS_BY_ERROR: list[tuple[type[BootcampError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (CapacityExceededError, status.HTTP_409_CONFLICT),
    (SchedulesDisabledError, status.HTTP_403_FORBIDDEN),
    (InvalidWeekdayError, status.HTTP_400_BAD_REQUEST),
    (InvalidDateError, status.HTTP_400_BAD_REQUEST),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def get_application(request: Request) -> BootcampApplication:
    """The application container built during startup."""
    application = getattr(request.app.state, "application", None)
    if application is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Application not started"
        )
    return application


def http_error_for(error: BootcampError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            detail = "Storage unavailable" if status_code == 503 else str(error)
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
