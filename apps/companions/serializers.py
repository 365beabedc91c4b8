"""Serializers for companion profile and payout setup."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Companion


class CompanionSerializer(serializers.ModelSerializer):
    """Companion profile as seen by its owner and by admins."""

    user_id = serializers.ReadOnlyField(source="user.id")
    email = serializers.ReadOnlyField(source="user.email")
    has_split_account = serializers.ReadOnlyField()

    class Meta:
        model = Companion
        fields = [
            "id",
            "user_id",
            "email",
            "city",
            "bio",
            "hourly_rate",
            "is_available",
            "moderation_status",
            "bank_account_name",
            "has_split_account",
            "total_bookings",
            "total_earnings",
            "created_at",
        ]
        read_only_fields = [
            "id",
            "moderation_status",
            "bank_account_name",
            "total_bookings",
            "total_earnings",
            "created_at",
        ]


class AvailabilitySerializer(serializers.Serializer):
    is_available = serializers.BooleanField()


class BankAccountSerializer(serializers.Serializer):
    account_number = serializers.RegexField(r"^\d{10}$", error_messages={"invalid": "Account number must be 10 digits."})
    bank_code = serializers.CharField(max_length=20)
