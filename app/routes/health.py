# app/routes/health.py
"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Request, Response

from app.config import settings
from app.infrastructure.observability.logging import log_health_check

router = APIRouter()


@router.get("/health_check")
async def health_check():
    """Liveness probe - always returns 200 with an empty body if the app is running."""
    return Response(status_code=200)


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check covering Redis and the database pool.
    """
    checks = {}
    overall_ok = True

    # 1) Redis
    t0 = time.time()
    try:
        redis_ok = await request.app.state.redis_client.ping()
        latency_ms = round((time.time() - t0) * 1000, 1)
        checks["redis"] = {"ok": bool(redis_ok), "latency_ms": latency_ms}
        log_health_check("redis", bool(redis_ok), latency_ms)
        overall_ok = overall_ok and bool(redis_ok)
    except Exception as e:
        checks["redis"] = {"ok": False, "error": f"{type(e).__name__}: {e}"}
        overall_ok = False

    # 2) Database pool
    t0 = time.time()
    try:
        db_health = await request.app.state.db_pool.health_check()
        is_healthy = db_health.get("healthy", False)
        latency_ms = round((time.time() - t0) * 1000, 1)

        checks["database"] = {"ok": is_healthy, "latency_ms": latency_ms}
        if "pool_stats" in db_health:
            checks["database"].update(db_health["pool_stats"])
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

    # 3) Configuration
    config_issues = []
    if not settings.EMAIL_API_KEY.get_secret_value():
        config_issues.append("EMAIL_API_KEY not set")

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
    }
    overall_ok = overall_ok and not config_issues

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
