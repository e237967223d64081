"""Distance and fare quote views"""
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny

from ..serializers import DistanceRequestSerializer
from ..services import DistanceService
from .responses import service_response


class DistanceViewSet(viewsets.ViewSet):
    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'], url_path='calculate')
    def calculate(self, request):
        serializer = DistanceRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = DistanceService().calculate(
            data['source'],
            data['destination'],
            journey_type=data.get('journey_type'),
            cab_type=data.get('cab_type'),
            pickup_time=data.get('pickup_time'),
        )
        return service_response(result)


__all__ = ['DistanceViewSet']
