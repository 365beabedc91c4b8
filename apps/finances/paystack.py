"""
Paystack Payment Gateway client

Thin wrapper over the Paystack REST API used by the booking engine:
hosted checkout initialisation with split payments, transaction
verification, payout sub-accounts and webhook signature checks.

Amounts cross this boundary as ``Decimal`` major units; conversion to
kobo happens here. Every call is bounded by ``PAYSTACK_TIMEOUT`` and
any failure surfaces as ``GatewayError``.
"""

from __future__ import annotations

import hashlib
import hmac
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import requests
import structlog
from django.conf import settings  # type: ignore

from shared.domain.exceptions import GatewayError
from shared.domain.value_objects import Money

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InitializedTransaction:
    authorization_url: str
    reference: str
    access_code: str = ""


@dataclass(frozen=True)
class TransactionVerification:
    status: str
    amount: Decimal
    reference: str
    metadata: dict
    paid_at: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "amount": self.amount, "metadata": self.metadata}


def _secret_key() -> str:
    return getattr(settings, "PAYSTACK_SECRET_KEY", "")


def _request(method: str, endpoint: str, *, json: dict | None = None, params: dict | None = None) -> Any:
    """Perform an authenticated call and return the ``data`` member of the envelope."""
    base_url = getattr(settings, "PAYSTACK_BASE_URL", "https://api.paystack.co").rstrip("/")
    timeout = getattr(settings, "PAYSTACK_TIMEOUT", 10)
    log = logger.bind(method=method, endpoint=endpoint)

    try:
        response = requests.request(
            method,
            f"{base_url}{endpoint}",
            json=json,
            params=params,
            headers={
                "Authorization": f"Bearer {_secret_key()}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
        )
    except requests.exceptions.Timeout as exc:
        log.error("paystack_timeout", timeout=timeout)
        raise GatewayError(f"Paystack did not answer within {timeout}s.") from exc
    except requests.exceptions.RequestException as exc:
        log.error("paystack_network_error", error=str(exc))
        raise GatewayError(f"Could not reach Paystack: {exc}") from exc

    try:
        body = response.json()
    except ValueError:
        body = {}

    if not response.ok:
        message = body.get("message") or f"HTTP {response.status_code}"
        log.error("paystack_http_error", status_code=response.status_code, message=message)
        raise GatewayError(f"Paystack request failed: {message}")

    if not body.get("status"):
        message = body.get("message") or "unexpected response"
        log.error("paystack_rejected", message=message)
        raise GatewayError(f"Paystack rejected the request: {message}")

    return body.get("data")


def generate_reference() -> str:
    prefix = getattr(settings, "PAYMENT_REFERENCE_PREFIX", "fliq")
    return f"{prefix}_{uuid.uuid4()}"


def initialize_transaction(
    email: str,
    amount: Decimal,
    *,
    reference: str,
    metadata: dict,
    subaccount_code: str = "",
    transaction_charge: Decimal | None = None,
    currency: str = "NGN",
) -> InitializedTransaction:
    """
    Open a hosted checkout session.

    With a companion sub-account the gateway splits the proceeds itself:
    the platform keeps ``transaction_charge`` (flat, in major units) and
    bears the gateway fee (``bearer=account``). Without one, the platform
    collects the full amount.
    """
    payload: dict[str, Any] = {
        "email": email,
        "amount": Money(amount, currency).to_minor_units(),
        "currency": currency,
        "reference": reference,
        "metadata": metadata,
    }
    callback_url = getattr(settings, "PAYSTACK_CALLBACK_URL", "")
    if callback_url:
        payload["callback_url"] = callback_url

    if subaccount_code:
        payload["subaccount"] = subaccount_code
        payload["bearer"] = "account"
        if transaction_charge is not None:
            payload["transaction_charge"] = Money(transaction_charge, currency).to_minor_units()

    data = _request("POST", "/transaction/initialize", json=payload)
    logger.info("paystack_transaction_initialized", reference=reference, split=bool(subaccount_code))
    return InitializedTransaction(
        authorization_url=data["authorization_url"],
        reference=data.get("reference") or reference,
        access_code=data.get("access_code", ""),
    )


def verify_transaction(reference: str) -> TransactionVerification:
    data = _request("GET", f"/transaction/verify/{reference}")
    verification = TransactionVerification(
        status=data.get("status", ""),
        amount=Money.from_minor_units(data.get("amount") or 0, data.get("currency") or "NGN").amount,
        reference=data.get("reference") or reference,
        metadata=data.get("metadata") or {},
        paid_at=data.get("paid_at"),
    )
    logger.info("paystack_transaction_verified", reference=reference, status=verification.status)
    return verification


def create_subaccount(business_name: str, account_number: str, bank_code: str, percentage_charge: Decimal) -> str:
    """Register a payout destination; returns the sub-account code."""
    data = _request(
        "POST",
        "/subaccount",
        json={
            "business_name": business_name,
            "settlement_bank": bank_code,
            "account_number": account_number,
            "percentage_charge": float(percentage_charge),
        },
    )
    return data["subaccount_code"]


def resolve_bank_account(account_number: str, bank_code: str) -> dict[str, str]:
    data = _request("GET", "/bank/resolve", params={"account_number": account_number, "bank_code": bank_code})
    return {"account_name": data["account_name"], "account_number": data["account_number"]}


def list_banks(country: str = "nigeria") -> list[dict[str, str]]:
    data = _request("GET", "/bank", params={"country": country})
    return [{"name": bank["name"], "code": bank["code"]} for bank in data or []]


def verify_webhook_signature(raw_body: bytes, signature: str | None) -> bool:
    """Paystack signs webhook bodies with HMAC-SHA512 keyed by the secret key."""
    secret = _secret_key()
    if not signature or not secret:
        return False
    expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature)
