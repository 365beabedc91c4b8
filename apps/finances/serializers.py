"""Serializers for the finance domain (payments)."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    """Payment state and split as shown alongside a booking."""

    class Meta:
        model = Payment
        fields = [
            "id",
            "status",
            "amount",
            "currency",
            "platform_fee",
            "companion_earning",
            "platform_percentage",
            "reference",
            "authorization_url",
            "paid_at",
            "refunded_at",
            "settled_at",
        ]
        read_only_fields = fields
