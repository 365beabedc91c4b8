"""Moderation services: platform fee configuration and companion approval."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.db import transaction  # type: ignore

from apps.companions.models import Companion
from shared.domain.exceptions import NotFound, ValidationError

from .models import AdminLog, PlatformSetting

logger = logging.getLogger(__name__)


def _parse_percentage(raw) -> Decimal:
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError(
            "Platform fee must be a number.",
            errors={"platform_fee_percentage": ["Must be a number."]},
        )
    if not value.is_finite() or value < 0 or value > 100:
        raise ValidationError(
            "Platform fee must be between 0 and 100.",
            errors={"platform_fee_percentage": ["Must be between 0 and 100."]},
        )
    return value


def get_platform_fee_percentage() -> Decimal:
    """Fee percentage in effect now; falls back to PLATFORM_FEE_PERCENTAGE."""
    stored = (
        PlatformSetting.objects.filter(key=PlatformSetting.PLATFORM_FEE_PERCENTAGE)
        .values_list("value", flat=True)
        .first()
    )
    if stored is None:
        return Decimal(str(settings.PLATFORM_FEE_PERCENTAGE))
    try:
        return _parse_percentage(stored)
    except ValidationError:
        logger.error(f"Stored platform fee '{stored}' is invalid, using default")
        return Decimal(str(settings.PLATFORM_FEE_PERCENTAGE))


@transaction.atomic
def set_platform_fee_percentage(admin, raw_value) -> Decimal:
    """Change the fee for future bookings; existing splits are never touched."""
    value = _parse_percentage(raw_value)
    previous = get_platform_fee_percentage()
    PlatformSetting.objects.update_or_create(
        key=PlatformSetting.PLATFORM_FEE_PERCENTAGE,
        defaults={"value": str(value)},
    )
    AdminLog.record(
        admin,
        AdminLog.Action.UPDATE_PLATFORM_FEE,
        target_type="platform_setting",
        details={"platform_fee_percentage": str(value), "previous": str(previous)},
    )
    logger.info(f"Platform fee changed {previous}% -> {value}% by admin {admin.pk}")
    return value


def _get_companion_for_update(companion_id) -> Companion:
    try:
        return Companion.objects.select_for_update().get(pk=companion_id)
    except (Companion.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise NotFound("Companion not found.")


@transaction.atomic
def approve_companion(admin, companion_id) -> Companion:
    companion = _get_companion_for_update(companion_id)
    companion.moderation_status = Companion.ModerationStatus.APPROVED
    companion.save(update_fields=["moderation_status", "updated_at"])
    AdminLog.record(admin, AdminLog.Action.APPROVE_COMPANION, companion)
    logger.info(f"Companion {companion.pk} approved by admin {admin.pk}")
    return companion


@transaction.atomic
def reject_companion(admin, companion_id, reason: str = "") -> Companion:
    companion = _get_companion_for_update(companion_id)
    companion.moderation_status = Companion.ModerationStatus.REJECTED
    companion.save(update_fields=["moderation_status", "updated_at"])
    AdminLog.record(admin, AdminLog.Action.REJECT_COMPANION, companion, details={"reason": reason})
    logger.info(f"Companion {companion.pk} rejected by admin {admin.pk}")
    return companion
