"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .application.command_handlers import run_auto_completion_sweep, run_expiry_sweep

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_pending_bookings")
def expire_pending_bookings() -> dict[str, int]:
    """
    Expire booking requests the companion did not answer in time.

    Runs every minute. Accept requests past the deadline are also
    expired lazily, so this only bounds how long stale rows linger.

    Returns:
        dict: {"expired": number of bookings expired by this run}
    """
    expired = run_expiry_sweep()
    logger.info(f"expire_pending_bookings: {expired} expired")
    return {"expired": expired}


@shared_task(name="bookings.auto_complete_bookings")
def auto_complete_bookings() -> dict[str, int]:
    """
    Complete bookings whose client neither confirmed nor disputed
    within the completion window. Runs every 15 minutes.

    Returns:
        dict: {"completed": number of bookings completed by this run}
    """
    completed = run_auto_completion_sweep()
    logger.info(f"auto_complete_bookings: {completed} completed")
    return {"completed": completed}
