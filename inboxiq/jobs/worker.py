"""
Generic background worker runner.

Reads the desired job name from CLI args or the WORKER_JOB environment
variable, opens the database pool for the lifetime of the job and
delegates to the registered coroutine.
"""

import asyncio
import os
import sys
from collections.abc import Awaitable, Callable
from typing import Any

from structlog.contextvars import bind_contextvars

from inboxiq.config import settings
from inboxiq.db.pool import db_pool
from inboxiq.features.leads.jobs import run_lead_recency_refresh
from inboxiq.infrastructure.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)

JobCoroutine = Callable[[], Awaitable[Any]]

JOB_REGISTRY: dict[str, JobCoroutine] = {
    "lead_recency_refresh": run_lead_recency_refresh,
}


def _resolve_job_name() -> str:
    """Pick the target job from CLI args or WORKER_JOB env variable."""
    if len(sys.argv) > 1:
        return sys.argv[1].strip().lower()
    return os.getenv("WORKER_JOB", "lead_recency_refresh").strip().lower()


async def run_worker(job_name: str | None = None) -> None:
    """Run the requested background job."""
    name = (job_name or _resolve_job_name()).strip().lower()
    if name not in JOB_REGISTRY:
        raise ValueError(
            f"Unknown worker job '{name}'. "
            f"Available jobs: {', '.join(sorted(JOB_REGISTRY.keys()))}"
        )

    bind_contextvars(job=name)
    logger.info("Starting background worker")
    await JOB_REGISTRY[name]()


async def _run_with_pool(job_name: str) -> None:
    await db_pool.initialize()
    try:
        await run_worker(job_name)
    finally:
        await db_pool.close()


def main() -> None:
    """CLI entrypoint."""
    setup_logging(log_level=settings.LOG_LEVEL)
    asyncio.run(_run_with_pool(_resolve_job_name()))


if __name__ == "__main__":
    main()
