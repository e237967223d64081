"""Booking-related views using BookingService"""
import logging

from django.views.decorators.csrf import csrf_exempt
from django.http import JsonResponse

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.authentication import JWTAuthentication

import stripe

from ..permissions import IsAdminRole
from ..serializers import (
    BookingSerializer, BookingTrackSerializer, BookingCreateSerializer, AssignDriverSerializer, PaymentUpdateSerializer,
    StatusUpdateSerializer, CancelSerializer, RefundRequestSerializer,
)
from ..services import BookingService, RefundService, PaymentService
from ..payment_gateways.stripe_payment_gateway import StripePaymentGateway
from .responses import service_response

logger = logging.getLogger(__name__)


def booking_body(result):
    return {'booking': BookingSerializer(result['booking']).data}


class BookingViewSet(viewsets.GenericViewSet):
    """Booking lifecycle endpoints; `pk` accepts an id or a booking number"""
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated]
    serializer_class = BookingSerializer
    lookup_value_regex = '[^/.]+'

    def get_permissions(self):
        if self.action == 'track':
            return [AllowAny()]
        if self.action in ('assign_driver', 'confirmed', 'force_status'):
            return [IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    def list(self, request):
        result = BookingService().list_bookings(request.user)
        return service_response(result, lambda r: BookingSerializer(r['bookings'], many=True).data)

    def retrieve(self, request, pk=None):
        return service_response(BookingService().get_booking(pk, request.user), booking_body)

    def create(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = BookingService().create_booking(request.user, serializer.validated_data)
        return service_response(result, booking_body, status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='cancel')
    def cancel(self, request, pk=None):
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = BookingService().cancel_booking(pk, request.user, serializer.validated_data.get('reason') or None)
        return service_response(result, booking_body)

    @action(detail=True, methods=['post', 'put'], url_path='status')
    def force_status(self, request, pk=None):
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = BookingService().force_status(pk, serializer.validated_data['status'], request.user)
        return service_response(result, booking_body)

    @action(detail=True, methods=['post', 'put'], url_path='payment')
    def payment(self, request, pk=None):
        serializer = PaymentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = BookingService().update_payment(
            pk, request.user,
            payment_id=data.get('payment_id') or None,
            payment_status=data.get('payment_status'),
            payment_method=data.get('payment_method'),
        )
        return service_response(result, lambda r: {**booking_body(r), 'already_confirmed': r['already_confirmed']})

    @action(detail=True, methods=['post'], url_path='refund')
    def refund(self, request, pk=None):
        serializer = RefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = RefundService().process_refund(
            pk, request.user,
            payment_id=data.get('payment_id') or None,
            reason=data.get('reason') or None,
        )
        return service_response(result, lambda r: {
            **booking_body(r),
            'refund_id': r['refund_id'],
            'refund_amount': r['refund_amount'],
            'refund_status': r['refund_status'],
        })

    @action(detail=True, methods=['get'], url_path='refund-status')
    def refund_status(self, request, pk=None):
        return service_response(RefundService().refund_status(pk, request.user))

    @action(detail=False, methods=['get'], url_path=r'track/(?P<booking_number>[^/.]+)')
    def track(self, request, booking_number=None):
        result = BookingService().track_booking(booking_number)
        return service_response(result, lambda r: BookingTrackSerializer(r['booking']).data)

    @action(detail=False, methods=['get'], url_path='confirmed')
    def confirmed(self, request):
        result = BookingService().list_unassigned_confirmed()
        return service_response(result, lambda r: BookingSerializer(r['bookings'], many=True).data)

    @action(detail=False, methods=['post'], url_path='assign-driver')
    def assign_driver(self, request):
        serializer = AssignDriverSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = BookingService().assign_driver(data['booking_id'], data['driver_id'], request.user)
        return service_response(result, lambda r: {**booking_body(r), 'driver': r['driver']})


@csrf_exempt
def stripe_webhook(request):
    payload = request.body
    sig_header = request.META.get('HTTP_STRIPE_SIGNATURE', '')

    try:
        event = StripePaymentGateway().construct_webhook_event(payload, sig_header)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except stripe.error.SignatureVerificationError as e:
        return JsonResponse({'error': str(e)}, status=400)

    if event['type'] == 'checkout.session.completed':
        session = event['data']['object']
        result = PaymentService().handle_checkout_completed(session)
        if result is not None and not result['success']:
            logger.warning(f"[WEBHOOK] Checkout {session.get('id')} not applied: {result['error']}")

    return JsonResponse({'status': 'success'}, status=200)


__all__ = ['BookingViewSet', 'stripe_webhook']
