"""Notifications app package.

Subscribes to booking domain events on the in-process message bus and
relays them to users as in-app notifications (and email for admins on
disputes). Delivery runs in Celery so a slow channel never holds up the
request that changed the booking.
"""
