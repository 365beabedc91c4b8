"""Companion profile and Paystack payout account setup."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from apps.companions.models import Companion
from shared.domain.exceptions import GatewayError

pytestmark = pytest.mark.django_db


@pytest.fixture
def companion_api(companion_user):
    api = APIClient()
    api.force_authenticate(companion_user)
    return api


def test_profile_and_availability(companion_api, companion):
    response = companion_api.get(reverse("companion-me"))
    assert response.status_code == 200
    assert response.data["id"] == str(companion.id)
    assert response.data["has_split_account"] is True

    response = companion_api.patch(reverse("companion-availability"), {"is_available": False}, format="json")
    assert response.data == {"is_available": False}
    companion.refresh_from_db()
    assert not companion.is_bookable


def test_profile_missing_is_404(make_user):
    api = APIClient()
    api.force_authenticate(make_user("companion"))

    assert api.get(reverse("companion-me")).status_code == 404


def test_clients_cannot_manage_payout_accounts(client_user):
    api = APIClient()
    api.force_authenticate(client_user)

    response = api.post(reverse("companion-subaccount"), {"account_number": "0123456789", "bank_code": "058"})
    assert response.status_code == 403


def test_bank_account_verification_stores_account_name(companion_api, companion):
    resolved = {"account_name": "ADA OBI", "account_number": "0123456789"}
    with patch("apps.finances.paystack.resolve_bank_account", return_value=resolved) as resolve:
        response = companion_api.post(
            reverse("companion-bank-verify"),
            {"account_number": "0123456789", "bank_code": "058"},
            format="json",
        )

    assert response.status_code == 200
    assert response.data == resolved
    resolve.assert_called_once_with("0123456789", "058")
    companion.refresh_from_db()
    assert (companion.bank_account_name, companion.bank_code) == ("ADA OBI", "058")


def test_account_number_must_have_ten_digits(companion_api):
    response = companion_api.post(
        reverse("companion-bank-verify"),
        {"account_number": "12345", "bank_code": "058"},
        format="json",
    )

    assert response.status_code == 400
    assert "account_number" in response.data


def test_subaccount_uses_current_platform_fee(companion_api, companion):
    Companion.objects.filter(pk=companion.pk).update(paystack_subaccount_code="", bank_account_name="ADA OBI")

    with patch("apps.finances.paystack.create_subaccount", return_value="ACCT_new") as create:
        response = companion_api.post(
            reverse("companion-subaccount"),
            {"account_number": "0123456789", "bank_code": "058"},
            format="json",
        )

    assert response.status_code == 201
    assert response.data == {"subaccount_code": "ACCT_new"}
    create.assert_called_once_with("ADA OBI", "0123456789", "058", Decimal("20"))
    companion.refresh_from_db()
    assert companion.paystack_subaccount_code == "ACCT_new"


def test_subaccount_gateway_failure_changes_nothing(companion_api, companion):
    with patch("apps.finances.paystack.create_subaccount", side_effect=GatewayError("Paystack down")):
        response = companion_api.post(
            reverse("companion-subaccount"),
            {"account_number": "0123456789", "bank_code": "058"},
            format="json",
        )

    assert response.status_code == 502
    companion.refresh_from_db()
    assert companion.paystack_subaccount_code == "ACCT_companion"
