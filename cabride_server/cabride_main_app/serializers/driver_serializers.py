"""Driver serializers"""
from rest_framework import serializers
from ..models import Driver


class DriverSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='display_name', read_only=True)
    phone = serializers.CharField(source='contact_phone', read_only=True)
    vehicle_type = serializers.StringRelatedField()

    class Meta:
        model = Driver
        fields = [
            'id', 'name', 'phone', 'license_number', 'vehicle_number', 'vehicle_model', 'vehicle_type',
            'is_approved', 'is_available', 'current_booking', 'ratings', 'total_rides', 'total_ratings',
        ]
        read_only_fields = fields


class AvailabilitySerializer(serializers.Serializer):
    is_available = serializers.BooleanField()


class ApprovalSerializer(serializers.Serializer):
    is_approved = serializers.BooleanField()
