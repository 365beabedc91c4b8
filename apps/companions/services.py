"""Companion payout account setup."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore

from apps.finances import paystack
from apps.moderation.services import get_platform_fee_percentage
from shared.domain.exceptions import NotFound

from .models import Companion

logger = logging.getLogger(__name__)


def get_companion_for_user(user) -> Companion:
    try:
        return Companion.objects.select_related("user").get(user=user)
    except Companion.DoesNotExist:
        raise NotFound("Companion profile not found.")


def verify_bank_account(companion: Companion, account_number: str, bank_code: str) -> dict[str, str]:
    """Resolve the account holder name and keep the verified details on the profile."""
    resolved = paystack.resolve_bank_account(account_number, bank_code)
    Companion.objects.filter(pk=companion.pk).update(
        bank_account_number=account_number,
        bank_account_name=resolved["account_name"],
        bank_code=bank_code,
    )
    logger.info(f"Bank account verified for companion {companion.pk}")
    return resolved


def create_payout_subaccount(
    companion: Companion,
    account_number: str,
    bank_code: str,
    account_name: str = "",
) -> str:
    """
    Register the companion as a Paystack sub-account.

    The gateway call happens outside any transaction; only the returned
    code and bank details are persisted afterwards.
    """
    business_name = account_name or companion.bank_account_name or companion.user.display_name
    code = paystack.create_subaccount(
        business_name,
        account_number,
        bank_code,
        get_platform_fee_percentage(),
    )
    with transaction.atomic():
        Companion.objects.filter(pk=companion.pk).update(
            paystack_subaccount_code=code,
            bank_account_number=account_number,
            bank_account_name=business_name,
            bank_code=bank_code,
        )
    logger.info(f"Paystack sub-account {code} created for companion {companion.pk}")
    return code
