"""Users app package.

Identity and role provider for the marketplace. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout the
project; the booking engine only relies on ``id`` and ``role``.
"""
