"""
Session Reconcile Job.
Runs every tick (hourly by default) so any template slot whose horizon has
come into range gets its session, including after a restart that missed
the previous tick.
"""

import asyncio
from datetime import UTC, datetime

from bootcamp.config import settings
from bootcamp.infrastructure.observability.logging import get_logger
from bootcamp.services.application import BootcampApplication
from bootcamp.services.storage import open_storage

logger = get_logger(__name__)


class SessionReconcileJobError(Exception):
    """Custom exception for reconcile job operations."""

    def __init__(self, message: str, operation: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


class SessionReconcileJob:
    """Background job wrapping ``SchedulingService.reconcile``."""

    def __init__(self, application: BootcampApplication):
        self.application = application
        self.is_running = False
        self.last_run_time: datetime | None = None
        self.last_metrics: dict | None = None
        self.runs = 0

    async def run_once(self) -> dict:
        """
        Run a single reconciliation.

        Returns:
            Dict: Reconcile metrics (created, skipped, per-slot errors)

        Raises:
            SessionReconcileJobError: If the session snapshot cannot be loaded
        """
        if self.is_running:
            logger.warning("Session reconcile job already running, skipping this iteration")
            return {"skipped": True, "reason": "already_running"}

        try:
            self.is_running = True
            result = await self.application.on_tick()
            metrics = result.to_dict()

            self.runs += 1
            self.last_run_time = datetime.now(UTC)
            self.last_metrics = metrics

            if not result.ok:
                logger.warning(
                    "Session reconcile job finished with slot errors",
                    errors=result.errors,
                    errors_count=len(result.errors),
                )
            return metrics

        except Exception as e:
            logger.error("Session reconcile job failed", error=str(e), error_type=type(e).__name__)
            raise SessionReconcileJobError(
                f"Session reconcile job failed: {e}", operation="run_once"
            ) from e

        finally:
            self.is_running = False

    def get_job_status(self) -> dict:
        return {
            "job_name": "session_reconcile",
            "is_running": self.is_running,
            "runs": self.runs,
            "last_run_time": self.last_run_time.isoformat() if self.last_run_time else None,
            "last_metrics": self.last_metrics,
            "interval_minutes": settings.RECONCILE_INTERVAL_MINUTES,
        }


async def start_session_reconcile_scheduler(
    job: SessionReconcileJob, interval_minutes: int | None = None
):
    """
    Run the reconcile job forever, once per interval.

    Errors are logged and the loop keeps going; cancellation stops it.
    """
    interval = interval_minutes or settings.RECONCILE_INTERVAL_MINUTES
    logger.info("Starting session reconcile scheduler", interval_minutes=interval)

    while True:
        try:
            metrics = await job.run_once()

            if not metrics.get("skipped", False):
                logger.info(
                    "Session reconcile cycle completed",
                    **{k: v for k, v in metrics.items() if k != "errors"},
                )

            await asyncio.sleep(interval * 60)

        except asyncio.CancelledError:
            logger.info("Session reconcile scheduler stopped")
            raise
        except Exception as e:
            logger.error(
                "Error in session reconcile scheduler", error=str(e), error_type=type(e).__name__
            )
            # Wait a bit before retrying to avoid tight error loops
            await asyncio.sleep(60)


async def run_session_reconcile_worker():
    """Standalone worker: open storage, reconcile once, then keep ticking."""
    storage = await open_storage(settings)
    try:
        application = BootcampApplication.from_settings(
            settings, storage.session_repository, storage.schedule_repository
        )
        await application.start()
        await start_session_reconcile_scheduler(SessionReconcileJob(application))
    finally:
        await storage.close()


async def run_session_reconcile_once():
    """Standalone worker: a single reconciliation (for an external cron)."""
    storage = await open_storage(settings)
    try:
        application = BootcampApplication.from_settings(
            settings, storage.session_repository, storage.schedule_repository
        )
        metrics = await SessionReconcileJob(application).run_once()
        logger.info("One-off session reconcile completed", **{k: v for k, v in metrics.items() if k != "errors"})
    finally:
        await storage.close()
