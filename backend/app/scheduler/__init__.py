"""
Scheduler initialization and management.
"""

from __future__ import annotations

import logging
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import get_settings
from core.services import IssueStore

from . import jobs

logger = logging.getLogger("backend.scheduler")

JOB_DEFINITIONS = {
    "purge_expired_issues": {
        "func": jobs.run_expiry_purge_job,
        "description": "Delete issues past their time-to-live",
    },
}

# Rebuilt on every start so it binds to the running event loop
scheduler: AsyncIOScheduler | None = None


def _build_scheduler() -> AsyncIOScheduler:
    return AsyncIOScheduler(timezone="UTC")


def schedule_default_jobs(target: AsyncIOScheduler, store: IssueStore) -> None:
    settings = get_settings()
    target.add_job(
        jobs.run_expiry_purge_job,
        IntervalTrigger(seconds=settings.expiry_purge_interval_seconds),
        args=[store],
        id="purge_expired_issues",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=60,
    )


def start_scheduler(store: IssueStore) -> None:
    global scheduler
    if scheduler is not None and scheduler.running:
        return
    scheduler = _build_scheduler()
    schedule_default_jobs(scheduler, store)
    scheduler.start()
    logger.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))


def shutdown_scheduler() -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")


def list_jobs() -> list[dict[str, Any]]:
    if scheduler is None:
        return []
    items = []
    for job in scheduler.get_jobs():
        items.append(
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger),
                "description": JOB_DEFINITIONS.get(job.id, {}).get("description"),
            }
        )
    return items
