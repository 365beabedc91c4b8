"""API views for admin moderation."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.application.command_handlers import resolve_dispute
from apps.bookings.models import Booking
from apps.bookings.serializers import BookingSerializer
from apps.companions.serializers import CompanionSerializer
from apps.users.permissions import IsAdminRole

from .models import AdminLog
from .serializers import (
    AdminLogSerializer,
    CompanionDecisionSerializer,
    PlatformSettingsSerializer,
    ResolveDisputeSerializer,
)
from .services import approve_companion, get_platform_fee_percentage, reject_companion, set_platform_fee_percentage

DEFAULT_LOG_LIMIT = 50
MAX_LOG_LIMIT = 500


class DisputeListView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):  # type: ignore
        disputes = Booking.objects.select_related("client", "companion", "companion__user", "payment").filter(
            status=Booking.Status.DISPUTED
        ).order_by("disputed_at")
        return Response(BookingSerializer(disputes, many=True).data)


class ResolveDisputeView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request, booking_id):  # type: ignore
        serializer = ResolveDisputeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = resolve_dispute(
            booking_id,
            serializer.validated_data["resolution"],
            request.user.id,
            serializer.validated_data["notes"],
        )
        booking = Booking.objects.select_related("client", "companion", "companion__user", "payment").get(pk=booking.pk)
        return Response(BookingSerializer(booking).data)


class ApproveCompanionView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request, companion_id):  # type: ignore
        companion = approve_companion(request.user, companion_id)
        return Response(CompanionSerializer(companion).data)


class RejectCompanionView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request, companion_id):  # type: ignore
        serializer = CompanionDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        companion = reject_companion(request.user, companion_id, serializer.validated_data["reason"])
        return Response(CompanionSerializer(companion).data)


class PlatformSettingsView(APIView):
    """Platform fee percentage applied to bookings created from now on."""

    permission_classes = [IsAdminRole]

    def get(self, request):  # type: ignore
        return Response({"platform_fee_percentage": str(get_platform_fee_percentage())})

    def patch(self, request):  # type: ignore
        serializer = PlatformSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        value = set_platform_fee_percentage(request.user, serializer.validated_data["platform_fee_percentage"])
        return Response({"platform_fee_percentage": str(value)}, status=status.HTTP_200_OK)


class AdminLogListView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):  # type: ignore
        try:
            limit = int(request.query_params.get("limit", DEFAULT_LOG_LIMIT))
        except ValueError:
            limit = DEFAULT_LOG_LIMIT
        limit = max(1, min(limit, MAX_LOG_LIMIT))
        logs = AdminLog.objects.select_related("admin").order_by("-created_at")[:limit]
        return Response(AdminLogSerializer(logs, many=True).data)
