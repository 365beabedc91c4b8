"""API views for Paystack payment verification.

The client's browser returns from the hosted checkout to ``callback``,
the gateway itself reports charges to ``webhook``. Both end up in
``verify_payment_callback``, which re-reads the outcome from the
Paystack API instead of trusting the incoming payload.
"""

from __future__ import annotations

import json
import logging
from urllib.parse import urlencode

import structlog
from django.conf import settings  # type: ignore
from django.http import HttpResponseRedirect, JsonResponse  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore
from rest_framework import permissions  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.exceptions import EngineError

from . import paystack
from .models import Payment, PaymentTransaction
from .services import verify_payment_callback

logger = logging.getLogger(__name__)
webhook_logger = structlog.get_logger("apps.finances.webhook")


class VerifyPaymentView(APIView):
    """Poll the gateway for a reference the caller is a party to."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, reference: str):  # type: ignore
        user = request.user
        payment = Payment.objects.select_related("booking", "booking__companion").filter(reference=reference).first()
        if payment is not None and not user.is_admin():
            booking = payment.booking
            if user.id not in (booking.client_id, booking.companion.user_id):
                return Response({"code": "not_found", "detail": "Payment not found."}, status=404)
        return Response(verify_payment_callback(reference))


class PaystackCallbackView(APIView):
    """Browser redirect target after the hosted checkout."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def get(self, request):  # type: ignore
        reference = request.query_params.get("reference") or request.query_params.get("trxref")
        outcome = "error"
        if reference:
            try:
                result = verify_payment_callback(reference)
                outcome = "success" if result["status"] == "success" else "failed"
            except EngineError as exc:
                logger.warning(f"Paystack callback for {reference} failed: {exc.message}")
        query = urlencode({"payment": outcome, "reference": reference or ""})
        return HttpResponseRedirect(f"{settings.CLIENT_DASHBOARD_URL}?{query}")


@csrf_exempt
@require_POST
def paystack_webhook(request):
    """
    Paystack event webhook.

    The body is authenticated with ``X-Paystack-Signature``. Only
    ``charge.success`` triggers verification; other events are recorded
    and acknowledged.
    """
    signature = request.headers.get("X-Paystack-Signature")
    if not paystack.verify_webhook_signature(request.body, signature):
        webhook_logger.warning("paystack_webhook_bad_signature")
        return JsonResponse({"status": "error", "message": "Invalid signature"}, status=401)

    try:
        event = json.loads(request.body)
    except json.JSONDecodeError:
        webhook_logger.error("paystack_webhook_invalid_json")
        return JsonResponse({"status": "error", "message": "Invalid JSON"}, status=400)

    event_type = event.get("event", "")
    data = event.get("data") or {}
    reference = data.get("reference")
    log = webhook_logger.bind(event_type=event_type, reference=reference)

    payment = Payment.objects.filter(reference=reference).first() if reference else None
    if payment is None:
        log.warning("paystack_webhook_unknown_reference")
        return JsonResponse({"status": "ignored"})

    PaymentTransaction.log(payment, PaymentTransaction.Event.WEBHOOK, event, data.get("status", ""))

    if event_type != "charge.success":
        log.info("paystack_webhook_ignored")
        return JsonResponse({"status": "ignored"})

    try:
        result = verify_payment_callback(reference)
    except EngineError as exc:
        log.error("paystack_webhook_verification_failed", error=exc.message, code=exc.code)
        return JsonResponse({"status": "error", "code": exc.code}, status=exc.http_status)

    log.info("paystack_webhook_processed", status=result["status"])
    return JsonResponse({"status": "ok"})


class BankListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):  # type: ignore
        country = request.query_params.get("country", "nigeria")
        return Response(paystack.list_banks(country))
