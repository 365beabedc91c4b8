"""Notification model.

In-app notification written by the realtime relay when a booking
changes state. Notifications are created from committed domain events
and consumed by their recipients; each can be marked as read.
"""

from __future__ import annotations

from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notifications'
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    event_type = models.CharField(max_length=50, blank=True)
    payload = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"
