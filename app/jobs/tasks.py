"""Background job tasks"""

import asyncio
import structlog

from app.jobs.celery_app import celery_app
from app.config import settings

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


@celery_app.task(name="auto_cancel_pending_reservations")
def auto_cancel_pending_reservations():
    """Cancel pending reservations nobody confirmed in time"""
    logger.info("Sweeping expired pending reservations")

    async def _sweep():
        from app.database import SessionLocal
        from app.services.reservations import cancel_expired_pending

        async with SessionLocal() as db:
            return await cancel_expired_pending(db, settings.pending_expiry_minutes)

    cancelled = run_async(_sweep())
    logger.info("Expired reservations cancelled", count=len(cancelled))
    return cancelled
