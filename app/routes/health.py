# app/routes/health.py
"""
Health check endpoints with database pool monitoring.
"""

import time

from fastapi import APIRouter

from app.config import settings
from app.db.pool import db_health_check
from app.infrastructure.observability.logging import log_health_check

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "analytics-dashboard"}


@router.get("/readyz")
async def readyz():
    """Readiness check: database pool and GHL configuration."""
    checks = {}
    overall_ok = True

    # 1) Database pool
    t0 = time.time()
    if not settings.SUPABASE_DB_URL:
        checks["database"] = {"ok": False, "error": "SUPABASE_DB_URL not set"}
        overall_ok = False
    else:
        try:
            db_health = await db_health_check()
            is_healthy = db_health.get("healthy", False)
            latency_ms = round((time.time() - t0) * 1000, 1)

            checks["database"] = {"ok": is_healthy, "latency_ms": latency_ms}
            if "warnings" in db_health:
                checks["database"]["warnings"] = db_health["warnings"]
            if not is_healthy:
                checks["database"]["error"] = db_health.get("error", "Database unhealthy")

            log_health_check("database", is_healthy, latency_ms, db_health.get("error"))
            overall_ok = overall_ok and is_healthy

        except Exception as e:
            checks["database"] = {
                "ok": False,
                "error": f"{type(e).__name__}: {e}",
                "latency_ms": round((time.time() - t0) * 1000, 1),
            }
            overall_ok = False

    # 2) GHL configuration
    config_issues = []
    if not settings.GHL_API_KEY:
        config_issues.append("GHL_API_KEY not set")
    if not settings.GHL_LOCATION_ID:
        config_issues.append("GHL_LOCATION_ID not set")

    checks["ghl"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "base_url": settings.GHL_BASE_URL,
    }
    overall_ok = overall_ok and not config_issues

    return {
        "overall_ok": overall_ok,
        "checks": checks,
        "environment": settings.environment,
        "timestamp": time.time(),
    }


@router.get("/health/database")
async def database_health():
    """Detailed database pool health information."""
    return await db_health_check()
