"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.finances.serializers import PaymentSerializer
from apps.users.serializers import UserSummarySerializer

from .application.command_handlers import CreateBookingCommand
from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request submitted by a client."""

    companion_id = serializers.UUIDField()
    booking_date = serializers.DateTimeField()
    hours = serializers.IntegerField(min_value=1, max_value=24)
    meeting_location = serializers.CharField(min_length=5, max_length=255)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)

    def to_command(self, client_id) -> CreateBookingCommand:
        data = self.validated_data
        return CreateBookingCommand(
            client_id=client_id,
            companion_id=data["companion_id"],
            booking_date=data["booking_date"],
            hours=data["hours"],
            meeting_location=data["meeting_location"],
            special_requests=data.get("special_requests", ""),
            total_amount=data.get("total_amount"),
        )


class DisputeSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class BookingSerializer(serializers.ModelSerializer):
    """Booking as seen by its parties and by admins."""

    client = UserSummarySerializer(read_only=True)
    companion_id = serializers.ReadOnlyField(source="companion.id")
    companion_user = UserSummarySerializer(source="companion.user", read_only=True)
    payment = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "client",
            "companion_id",
            "companion_user",
            "booking_date",
            "hours",
            "meeting_location",
            "special_requests",
            "total_amount",
            "status",
            "request_expires_at",
            "completion_requested_at",
            "disputed_at",
            "dispute_reason",
            "payment",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_payment(self, obj: Booking):  # type: ignore
        payment = getattr(obj, "payment", None)
        return PaymentSerializer(payment).data if payment is not None else None
