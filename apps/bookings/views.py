"""API views for the booking domain."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsClientRole, IsCompanionRole

from .application import command_handlers as commands
from .models import Booking, completion_window
from .repository import DjangoBookingRepository
from .serializers import BookingCreateSerializer, BookingSerializer, DisputeSerializer


class IsBookingParty(permissions.BasePermission):
    """The client, the booked companion and admins can see a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if user.is_admin():
            return True
        return user.id in (obj.client_id, obj.companion.user_id)


class BookingViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Booking requests and their lifecycle transitions.

    Transition endpoints only identify the caller; whether the caller is
    the right party for the booking is decided by the command handlers.
    """

    queryset = Booking.objects.select_related("client", "companion", "companion__user", "payment").all()
    permission_classes = [permissions.IsAuthenticated, IsBookingParty]
    filterset_fields = ["status"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [IsClientRole()]
        return super().get_permissions()

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        if user.is_admin():
            return qs
        if user.is_companion():
            return qs.filter(companion__user=user)
        return qs.filter(client=user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = commands.create_booking(serializer.to_command(request.user.id))
        return Response(
            {
                "booking_id": str(result.booking_id),
                "payment_url": result.payment_url,
                "reference": result.reference,
            },
            status=status.HTTP_201_CREATED,
        )

    def _respond(self, booking: Booking) -> Response:
        booking = Booking.objects.select_related("client", "companion", "companion__user", "payment").get(pk=booking.pk)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @action(detail=False, methods=["get"], url_path="pending-requests", permission_classes=[IsCompanionRole])
    def pending_requests(self, request):  # type: ignore
        """Requests still awaiting this companion's answer; overdue ones are hidden."""
        qs = DjangoBookingRepository().live_requests_for_companion(request.user.id, timezone.now())
        return Response(BookingSerializer(qs, many=True, context=self.get_serializer_context()).data)

    @action(detail=False, methods=["get"], url_path="pending-completion", permission_classes=[IsClientRole])
    def pending_completion(self, request):  # type: ignore
        """Bookings this client can still confirm or dispute; overdue ones are hidden."""
        cutoff = timezone.now() - completion_window()
        qs = DjangoBookingRepository().awaiting_confirmation_for_client(request.user.id, cutoff)
        return Response(BookingSerializer(qs, many=True, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"], permission_classes=[IsCompanionRole])
    def accept(self, request, pk=None):  # type: ignore
        return self._respond(commands.accept_booking(pk, request.user.id))

    @action(detail=True, methods=["post"], permission_classes=[IsCompanionRole])
    def reject(self, request, pk=None):  # type: ignore
        return self._respond(commands.reject_booking(pk, request.user.id))

    @action(detail=True, methods=["post"], url_path="request-completion", permission_classes=[IsCompanionRole])
    def request_completion(self, request, pk=None):  # type: ignore
        return self._respond(commands.request_completion(pk, request.user.id))

    @action(detail=True, methods=["post"], url_path="confirm-completion", permission_classes=[IsClientRole])
    def confirm_completion(self, request, pk=None):  # type: ignore
        return self._respond(commands.confirm_completion(pk, request.user.id))

    @action(detail=True, methods=["post"], permission_classes=[IsClientRole])
    def dispute(self, request, pk=None):  # type: ignore
        serializer = DisputeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = commands.dispute_completion(pk, request.user.id, serializer.validated_data["reason"])
        return self._respond(booking)

    @action(detail=True, methods=["get"], url_path="payment-url", permission_classes=[IsClientRole])
    def payment_url(self, request, pk=None):  # type: ignore
        result = commands.initialize_payment(pk, request.user.id)
        return Response({"booking_id": str(result.booking_id), "payment_url": result.payment_url, "reference": result.reference})
