import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("fliq")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Expire unanswered booking requests - every minute
    "expire-pending-bookings": {
        "task": "bookings.expire_pending_bookings",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Auto-complete bookings past the 48h confirmation window - every 15 minutes
    "auto-complete-bookings": {
        "task": "bookings.auto_complete_bookings",
        "schedule": crontab(minute="*/15"),
    },
}

app.conf.timezone = "Africa/Lagos"
