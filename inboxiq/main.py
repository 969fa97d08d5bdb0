# inboxiq/main.py
"""
FastAPI application with database pool lifecycle management.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from inboxiq.config import settings
from inboxiq.db.pool import db_pool
from inboxiq.features.leads import leads_router
from inboxiq.infrastructure.observability.logging import get_logger, setup_logging
from inboxiq.middleware import RequestContextMiddleware
from inboxiq.routes import health

setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared database pool on startup, close it on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    try:
        await db_pool.initialize()
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        raise

    yield

    logger.info("Application shutting down")
    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="InboxIQ",
    description="Lead detection and follow-up drafts from synced email",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(leads_router, prefix="/api")


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


# Outermost, so log_requests already sees the request id
app.add_middleware(RequestContextMiddleware)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
