# inboxiq/routes/health.py
"""
Health check endpoints with database pool monitoring.
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from inboxiq.db.pool import db_health_check
from inboxiq.features.leads.services import get_text_generator
from inboxiq.infrastructure.observability.logging import log_health_check

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "inboxiq"}


@router.get("/readyz")
async def readyz():
    """Readiness check: database pool round-trip plus text generator configuration."""
    checks = {}

    t0 = time.time()
    db_health = await db_health_check()
    latency_ms = round((time.time() - t0) * 1000, 1)
    db_ok = bool(db_health.get("healthy", False))

    checks["database"] = {"ok": db_ok, "latency_ms": latency_ms}
    if "pool_stats" in db_health:
        checks["database"].update(db_health["pool_stats"])
    if "warnings" in db_health:
        checks["database"]["warnings"] = db_health["warnings"]
    if not db_ok:
        checks["database"]["error"] = db_health.get("error", "Database unhealthy")

    log_health_check("database", db_ok, latency_ms, db_health.get("error"))

    # Generation degrades to fallback text, so it never fails readiness
    checks["text_generation"] = get_text_generator().describe()

    body = {"status": "ok" if db_ok else "degraded", "checks": checks}
    return JSONResponse(status_code=200 if db_ok else 503, content=body)
