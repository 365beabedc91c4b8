"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import BankListView, PaystackCallbackView, VerifyPaymentView, paystack_webhook

urlpatterns = [
    path("paystack/verify/<str:reference>/", VerifyPaymentView.as_view(), name="paystack-verify"),
    path("paystack/callback/", PaystackCallbackView.as_view(), name="paystack-callback"),
    path("paystack/webhook/", paystack_webhook, name="paystack-webhook"),
    path("banks/", BankListView.as_view(), name="bank-list"),
]
