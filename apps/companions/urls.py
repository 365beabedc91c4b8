"""URL routing for companion self-service endpoints."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import AvailabilityView, BankAccountVerifyView, MyCompanionProfileView, SubaccountView

urlpatterns = [
    path("me/", MyCompanionProfileView.as_view(), name="companion-me"),
    path("me/availability/", AvailabilityView.as_view(), name="companion-availability"),
    path("me/bank-account/verify/", BankAccountVerifyView.as_view(), name="companion-bank-verify"),
    path("me/subaccount/", SubaccountView.as_view(), name="companion-subaccount"),
]
