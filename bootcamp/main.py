# bootcamp/main.py
"""
HTTP control plane with storage and reconcile job lifecycle management.
"""

import asyncio
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request

from bootcamp.config import settings
from bootcamp.infrastructure.observability.logging import get_logger, log_request, setup_logging
from bootcamp.jobs.reconcile_job import SessionReconcileJob, start_session_reconcile_scheduler
from bootcamp.routes import health, leaderboard, schedules, sessions
from bootcamp.services.application import BootcampApplication
from bootcamp.services.storage import open_storage

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    storage = await open_storage(settings)
    scheduler_task: asyncio.Task | None = None

    try:
        application = BootcampApplication.from_settings(
            settings, storage.session_repository, storage.schedule_repository
        )
        await application.start()

        app.state.storage = storage
        app.state.application = application

        if settings.RUN_SCHEDULER_IN_PROCESS:
            job = SessionReconcileJob(application)
            app.state.reconcile_job = job
            scheduler_task = asyncio.create_task(start_session_reconcile_scheduler(job))

        logger.info(
            "All services initialized successfully",
            storage=storage.backend,
            scheduler=settings.RUN_SCHEDULER_IN_PROCESS,
        )

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        await storage.close()
        raise

    yield

    logger.info("Application shutting down")

    if scheduler_task:
        scheduler_task.cancel()
        with suppress(asyncio.CancelledError):
            await scheduler_task

    try:
        await storage.close()
    except Exception as e:
        logger.error("Error closing storage", error=str(e))

    logger.info("All services closed successfully")


app = FastAPI(
    title="Bootcamp Scheduler",
    description="Recurring bootcamp sessions, attendance and leaderboards",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(sessions.router)
app.include_router(schedules.router)
app.include_router(leaderboard.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.HTTP_PORT)
