"""Moderation app package.

Admin-only surface of the marketplace: dispute resolution, companion
approval, the platform fee setting and the append-only admin log that
records every one of those actions.
"""
