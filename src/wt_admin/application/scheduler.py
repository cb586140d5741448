"""Background jobs: the automated grading sweep and the consistency auditor.

Both run on the shared AsyncIOScheduler started in the app lifespan, each with
its own session. A failing run is logged and retried at the next interval.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config.settings import settings
from src.wt_admin.application.service import AdminService
from src.wt_common import database

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()
_service = AdminService()

GRADING_JOB_ID = "grading_sweep"
AUDIT_JOB_ID = "consistency_audit"


async def grading_sweep_job() -> None:
    try:
        async with database.async_session_factory() as db:
            await _service.run_grading_sweep(db)
    except Exception:
        logger.exception("Grading sweep failed")


async def consistency_audit_job() -> None:
    try:
        async with database.async_session_factory() as db:
            result = await _service.verify_all_invariants(db)
    except Exception:
        logger.exception("Consistency audit failed")
        return
    if result["ok"]:
        logger.info("Consistency audit passed")
    else:
        logger.error("Consistency audit found %d violations", len(result["violations"]))


def register_jobs() -> list[str]:
    """Add the enabled jobs to the scheduler; returns their ids."""
    added: list[str] = []
    if settings.GRADING_SWEEP_ENABLED:
        scheduler.add_job(
            grading_sweep_job,
            "interval",
            id=GRADING_JOB_ID,
            minutes=settings.GRADING_SWEEP_INTERVAL_MINUTES,
            replace_existing=True,
            max_instances=1,
        )
        added.append(GRADING_JOB_ID)
    if settings.AUDIT_ENABLED:
        scheduler.add_job(
            consistency_audit_job,
            "interval",
            id=AUDIT_JOB_ID,
            minutes=settings.AUDIT_INTERVAL_MINUTES,
            replace_existing=True,
            max_instances=1,
        )
        added.append(AUDIT_JOB_ID)
    return added


def start_scheduler() -> None:
    jobs = register_jobs()
    if not jobs:
        logger.info("No background jobs enabled")
        return
    scheduler.start()
    logger.info("Background scheduler started with jobs: %s", ", ".join(jobs))


def stop_scheduler() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
