"""API views for the companion's own profile and payout account."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsCompanionRole

from .serializers import AvailabilitySerializer, BankAccountSerializer, CompanionSerializer
from .services import create_payout_subaccount, get_companion_for_user, verify_bank_account


class MyCompanionProfileView(APIView):
    permission_classes = [IsCompanionRole]

    def get(self, request):  # type: ignore
        companion = get_companion_for_user(request.user)
        return Response(CompanionSerializer(companion).data)


class AvailabilityView(APIView):
    """Toggle whether new booking requests are accepted."""

    permission_classes = [IsCompanionRole]

    def patch(self, request):  # type: ignore
        serializer = AvailabilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        companion = get_companion_for_user(request.user)
        companion.is_available = serializer.validated_data["is_available"]
        companion.save(update_fields=["is_available", "updated_at"])
        return Response({"is_available": companion.is_available})


class BankAccountVerifyView(APIView):
    permission_classes = [IsCompanionRole]

    def post(self, request):  # type: ignore
        serializer = BankAccountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        companion = get_companion_for_user(request.user)
        resolved = verify_bank_account(
            companion,
            serializer.validated_data["account_number"],
            serializer.validated_data["bank_code"],
        )
        return Response(resolved)


class SubaccountView(APIView):
    """Create the Paystack sub-account that receives the companion's share."""

    permission_classes = [IsCompanionRole]

    def post(self, request):  # type: ignore
        serializer = BankAccountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        companion = get_companion_for_user(request.user)
        code = create_payout_subaccount(
            companion,
            serializer.validated_data["account_number"],
            serializer.validated_data["bank_code"],
            account_name=str(request.data.get("account_name", "")).strip(),
        )
        return Response({"subaccount_code": code}, status=status.HTTP_201_CREATED)
