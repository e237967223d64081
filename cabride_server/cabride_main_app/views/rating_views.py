"""Rating views"""
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..serializers import RateDriverSerializer, RateRiderSerializer
from ..services import RatingService
from .responses import service_response


def rating_body(result):
    return {
        'booking_number': result['booking'].booking_number,
        'rating': result['rating'],
        'average': result['average'],
        'total_ratings': result['total_ratings'],
    }


class RatingViewSet(viewsets.ViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=['post'], url_path='driver')
    def rate_driver(self, request):
        serializer = RateDriverSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = RatingService().rate_driver(
            request.user, data['booking_id'], data['driver_id'], data['rating'], data.get('comment', ''),
        )
        return service_response(result, rating_body)

    @action(detail=False, methods=['post'], url_path='user')
    def rate_rider(self, request):
        serializer = RateRiderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = RatingService().rate_rider(
            request.user, data['booking_id'], data['user_id'], data['rating'], data.get('comment', ''),
        )
        return service_response(result, rating_body)

    @action(detail=False, methods=['get'], url_path=r'user/(?P<user_id>\d+)')
    def rider_ratings(self, request, user_id=None):
        return service_response(RatingService().rider_ratings(user_id, request.user))


__all__ = ['RatingViewSet']
