"""Notification services: in-app records and email."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.mail import send_mail  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)


# ============================================================================
# BOOKING STATUS MESSAGES
# ============================================================================

# new_status -> (title, message to client, message to companion); None skips that party
STATUS_MESSAGES: dict[str, tuple[str, str | None, str | None]] = {
    "accepted": (
        "Booking accepted",
        "Your companion accepted the booking.",
        None,
    ),
    "rejected": (
        "Booking declined",
        "The companion declined your request. Any payment will be refunded.",
        None,
    ),
    "expired": (
        "Booking request expired",
        "The companion did not answer in time. Any payment will be refunded.",
        "A booking request expired before you answered it.",
    ),
    "pending_completion": (
        "Please confirm your booking",
        "Your companion marked the booking as completed. Confirm or dispute within 48 hours.",
        None,
    ),
    "completed": (
        "Booking completed",
        "Your booking is complete.",
        "The booking is complete and your earnings have been recorded.",
    ),
    "disputed": (
        "Booking disputed",
        None,
        "The client disputed the completion. An admin will review it.",
    ),
    "cancelled": (
        "Booking cancelled",
        "The dispute was resolved in your favour; your payment will be refunded.",
        "The dispute was resolved in the client's favour and the booking was cancelled.",
    ),
}


def status_notifications(new_status: str, client_id: int, companion_user_id: int) -> list[tuple[int, str, str]]:
    """(user_id, title, message) for every party that should hear about ``new_status``."""
    entry = STATUS_MESSAGES.get(new_status)
    if entry is None:
        return []
    title, client_message, companion_message = entry
    recipients = []
    if client_message:
        recipients.append((client_id, title, client_message))
    if companion_message:
        recipients.append((companion_user_id, title, companion_message))
    return recipients


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def create_in_app_notification(
    user_id: int,
    title: str,
    message: str,
    *,
    event_type: str = "",
    payload: dict | None = None,
) -> Notification | None:
    """Create an in-app notification; returns None if the user no longer exists."""
    User = get_user_model()
    if not User.objects.filter(pk=user_id).exists():
        logger.warning(f"Skipping notification '{title}': user {user_id} not found")
        return None
    notification = Notification.objects.create(
        user_id=user_id,
        title=title,
        message=message,
        event_type=event_type,
        payload=payload or {},
    )
    logger.info(f"In-app notification created for user {user_id}: {title}")
    return notification


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """Send a plain-text email; failures are logged and reported as False."""
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False
    logger.info(f"Email sent successfully to {recipient_email}: {subject}")
    return True


def notify_admins(title: str, message: str, *, event_type: str = "", payload: dict | None = None) -> int:
    """In-app notification plus email to every active admin; returns how many were notified."""
    User = get_user_model()
    admins = User.objects.filter(role=User.RoleChoices.ADMIN, is_active=True)
    for admin in admins:
        create_in_app_notification(admin.pk, title, message, event_type=event_type, payload=payload)
        if admin.email:
            send_email_notification(admin.email, title, message)
    return len(admins)
