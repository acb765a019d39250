"""
Presentation boundary.

The engine calls ``present`` once when a session is first materialized and
``update`` after every membership change. Rendering and transport belong to
the implementation; the engine only stores the returned handle.
"""

from typing import Protocol

from bootcamp.domain import Session
from bootcamp.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class SessionPresenter(Protocol):
    async def present(self, session: Session) -> str | None:
        """Post the session for the first time and return its handle."""
        ...

    async def update(self, session: Session) -> None:
        """Re-render an already presented session. No-op without a handle."""
        ...


class LoggingSessionPresenter:
    """Presenter for deployments without a chat integration."""

    async def present(self, session: Session) -> str | None:
        logger.info(
            "Session ready",
            session_id=session.session_id,
            date=session.date.to_iso(),
            time=session.time_label,
            participants=len(session.participants),
        )
        return None

    async def update(self, session: Session) -> None:
        if not session.presentation_handle:
            return
        logger.info(
            "Session changed",
            session_id=session.session_id,
            handle=session.presentation_handle,
            participants=len(session.participants),
        )
