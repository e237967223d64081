"""Payment views - gateway order creation and client-side verification"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..serializers import BookingSerializer, PaymentVerifySerializer
from ..services import BookingService, PaymentService
from .responses import service_response, error_response


class PaymentViewSet(viewsets.ViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=['post'], url_path='create-order')
    def create_order(self, request):
        booking_id = request.data.get('booking_id')
        if not booking_id:
            return Response({'error': 'booking_id is required'}, status=status.HTTP_400_BAD_REQUEST)
        result = PaymentService().create_order(booking_id, request.user)
        return service_response(result, lambda r: {
            'order': r['order'],
            'booking_number': r['booking'].booking_number,
        })

    @action(detail=False, methods=['post'], url_path='verify')
    def verify(self, request):
        serializer = PaymentVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = BookingService().verify_payment(
            data['booking_id'], data['order_id'], data['payment_id'], data['signature'],
        )
        if not result['success']:
            return error_response(result)
        return Response({
            'booking': BookingSerializer(result['booking']).data,
            'already_confirmed': result['already_confirmed'],
        })


__all__ = ['PaymentViewSet']
