"""Serializers for user-related API payloads."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Short public view of a user embedded in booking and log responses."""

    name = serializers.ReadOnlyField(source="display_name")

    class Meta:
        model = User
        fields = ["id", "email", "name", "role"]
        read_only_fields = fields
