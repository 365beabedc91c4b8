"""Serializers for the admin moderation API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserSummarySerializer

from .models import AdminLog


class ResolveDisputeSerializer(serializers.Serializer):
    resolution = serializers.ChoiceField(choices=["complete", "revoke"])
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class CompanionDecisionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class PlatformSettingsSerializer(serializers.Serializer):
    platform_fee_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100)


class AdminLogSerializer(serializers.ModelSerializer):
    admin = UserSummarySerializer(read_only=True)

    class Meta:
        model = AdminLog
        fields = ["id", "admin", "action", "target_type", "target_id", "details", "created_at"]
        read_only_fields = fields
