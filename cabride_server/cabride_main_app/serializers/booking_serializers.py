"""Booking-related serializers"""
from rest_framework import serializers
from ..models import Booking
from ..utils.constants import BookingStatus, JourneyType, PaymentMethod, PaymentStatus
from .location_serializers import CitySerializer


class BookingSerializer(serializers.ModelSerializer):
    pickup_location = CitySerializer(read_only=True)
    drop_location = CitySerializer(read_only=True)
    cab_type = serializers.StringRelatedField()
    driver = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            'id', 'booking_number', 'user', 'driver', 'cab_type',
            'pickup_location', 'drop_location', 'pickup_address', 'drop_address',
            'journey_type', 'pickup_date', 'pickup_time', 'return_date', 'return_time',
            'distance', 'duration', 'passenger_name', 'passenger_email', 'passenger_phone',
            'additional_notes', 'base_amount', 'tax_amount', 'toll_charges', 'driver_allowance',
            'night_charges', 'total_amount', 'fare_breakdown', 'status', 'payment_status',
            'payment_method', 'payment_id', 'assigned_at', 'started_at', 'completed_at',
            'cancelled_at', 'user_rating', 'driver_rating', 'refund_status', 'refund_id',
            'refund_amount', 'refund_processed_at', 'cancellation_reason', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_driver(self, obj):
        return obj.driver.summary() if obj.driver_id else None


class BookingTrackSerializer(serializers.ModelSerializer):
    """Public view for tracking by booking number"""
    driver = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = ['booking_number', 'status', 'pickup_address', 'drop_address', 'pickup_date', 'pickup_time', 'driver']

    def get_driver(self, obj):
        return obj.driver.summary() if obj.driver_id else None


class AssignDriverSerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    driver_id = serializers.IntegerField()


class BookingCreateSerializer(serializers.Serializer):
    pickup_address = serializers.CharField(max_length=255)
    drop_address = serializers.CharField(max_length=255)
    pickup_location = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    drop_location = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    cab_type = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    journey_type = serializers.ChoiceField(choices=JourneyType.CHOICES, required=False)
    pickup_date = serializers.DateField(input_formats=['%Y-%m-%d'])
    pickup_time = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    return_date = serializers.DateField(input_formats=['%Y-%m-%d'], required=False, allow_null=True)
    return_time = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    distance = serializers.FloatField(required=False, allow_null=True, min_value=0)
    duration = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    passenger_name = serializers.CharField(max_length=100)
    passenger_email = serializers.EmailField()
    passenger_phone = serializers.CharField(max_length=15)
    additional_notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    base_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    tax_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    toll_charges = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    driver_allowance = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    night_charges = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)


class PaymentUpdateSerializer(serializers.Serializer):
    payment_id = serializers.CharField(required=False, allow_blank=True)
    payment_status = serializers.ChoiceField(choices=PaymentStatus.CHOICES, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.CHOICES, required=False)


class PaymentVerifySerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    order_id = serializers.CharField()
    payment_id = serializers.CharField()
    signature = serializers.CharField()


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.CHOICES)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class RefundRequestSerializer(serializers.Serializer):
    payment_id = serializers.CharField(required=False, allow_blank=True)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
