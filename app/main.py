"""
Analytics dashboard API: GHL tag conversions, SMS costs and call metrics.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import settings
from app.db.pool import db_pool
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.middleware import RequestContextMiddleware
from app.routes import atc_conversions, health, metrics, sms_costs
from app.services.ghl.client import GhlClient, UpstreamFetchFailed
from app.services.ghl.filter_builder import DashboardType
from app.services.metrics_cache import MetricsCache

# Setup logging before creating the app
setup_logging(log_level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    startup_tasks = []

    try:
        if settings.SUPABASE_DB_URL:
            logger.info("Initializing database pool")
            await db_pool.initialize()
            startup_tasks.append("database_pool")
        else:
            logger.warning("SUPABASE_DB_URL not set, call metrics unavailable")

        if not settings.ghl_configured():
            logger.warning("GHL credentials not set, GHL dashboards will fail upstream")
        app.state.ghl_client = GhlClient()
        startup_tasks.append("ghl_client")

        logger.info("All services initialized successfully", services=startup_tasks)

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e), completed_tasks=startup_tasks)

        if "database_pool" in startup_tasks:
            try:
                await db_pool.close()
            except Exception as cleanup_error:
                logger.error("Error cleaning up database pool", error=str(cleanup_error))

        raise

    yield

    logger.info("Application shutting down")

    shutdown_errors = []

    try:
        await app.state.ghl_client.close()
    except Exception as e:
        logger.error("Error closing GHL client", error=str(e))
        shutdown_errors.append(f"GHL: {e}")

    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))
        shutdown_errors.append(f"Database: {e}")

    if shutdown_errors:
        logger.warning("Some services had shutdown errors", errors=shutdown_errors)
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="Analytics Dashboard API",
    description="GHL tag conversions, SMS messaging costs and call analytics",
    version="0.1.0",
    lifespan=lifespan,
)

# Caches are per process and owned by the app, not module globals
app.state.metrics_cache = MetricsCache(settings.METRICS_CACHE_TTL_SECONDS, name="call_metrics")
app.state.tag_counts_caches = {
    dashboard_type: MetricsCache(settings.TAG_COUNTS_CACHE_TTL_SECONDS, name=f"tag_counts:{dashboard_type.value}")
    for dashboard_type in DashboardType
}

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(atc_conversions.router)
app.include_router(sms_costs.router)
app.include_router(metrics.router)


@app.exception_handler(UpstreamFetchFailed)
async def upstream_fetch_failed_handler(request: Request, exc: UpstreamFetchFailed):
    """GHL failures are a bad gateway; pass the upstream body through."""
    logger.error(
        "GHL request failed",
        operation=exc.operation,
        upstream_status=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=502, content={"error": "GHL request failed", "details": exc.body})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    logger.info(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
