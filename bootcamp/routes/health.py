# bootcamp/routes/health.py
"""
Health check endpoints with storage and reconcile job status.
"""

import time

from fastapi import APIRouter, Request

from bootcamp.config import settings

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "bootcamp-scheduler"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check: storage reachable and the application container started.
    """
    checks = {}
    overall_ok = True

    # 1) Storage health check
    storage = getattr(request.app.state, "storage", None)
    t0 = time.time()
    if storage is None:
        checks["storage"] = {"ok": False, "error": "Storage not initialized"}
        overall_ok = False
    else:
        try:
            storage_ok = await storage.ping()
            checks["storage"] = {
                "ok": bool(storage_ok),
                "backend": storage.backend,
                "latency_ms": round((time.time() - t0) * 1000, 1),
            }
            overall_ok = overall_ok and bool(storage_ok)
        except Exception as e:
            checks["storage"] = {"ok": False, "error": f"{type(e).__name__}: {e}"}
            overall_ok = False

    # 2) Reconcile job status
    job = getattr(request.app.state, "reconcile_job", None)
    checks["reconcile_job"] = job.get_job_status() if job else {"enabled": False}

    # 3) Configuration
    checks["configuration"] = {
        "ok": True,
        "environment": settings.environment,
        "timezone": settings.TIMEZONE,
        "schedules_enabled": settings.ENABLE_SCHEDULES,
        "session_limit": settings.session_limit(),
    }

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
