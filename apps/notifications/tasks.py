"""Celery tasks delivering notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import create_in_app_notification, notify_admins

logger = logging.getLogger(__name__)


@shared_task(name="notifications.deliver_notification")
def deliver_notification(user_id: int, title: str, message: str, event_type: str = "", payload: dict | None = None) -> bool:
    return create_in_app_notification(user_id, title, message, event_type=event_type, payload=payload) is not None


@shared_task(name="notifications.alert_admins")
def alert_admins(title: str, message: str, event_type: str = "", payload: dict | None = None) -> int:
    notified = notify_admins(title, message, event_type=event_type, payload=payload)
    logger.info(f"alert_admins: '{title}' sent to {notified} admin(s)")
    return notified
