"""DRF exception handler rendering engine errors with stable codes."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import EngineError

logger = logging.getLogger(__name__)


def engine_exception_handler(exc, context):  # type: ignore
    """
    Map EngineError subclasses to ``{"code", "detail", ...}`` responses.

    DRF's own exceptions (parse errors, authentication, serializer
    validation) keep DRF's rendering. Anything else is logged and turned
    into an opaque 500 so internals never reach the client.
    """
    if isinstance(exc, EngineError):
        view = context.get("view")
        logger.info(
            f"Engine error {exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
        )
        return Response(exc.to_dict(), status=exc.http_status)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    logger.error(f"Unhandled error: {exc}", exc_info=True)
    return Response(
        {"code": "internal_error", "detail": "Internal server error."},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
