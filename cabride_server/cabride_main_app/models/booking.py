"""Booking-related models"""
from decimal import Decimal

from django.db import models
from django.contrib.auth.models import User

from ..utils.constants import (
    BookingStatus, JourneyType, PaymentStatus, PaymentMethod, RefundStatus, BusinessRules,
)


class Booking(models.Model):
    AMOUNT_FIELDS = ['base_amount', 'tax_amount', 'toll_charges', 'driver_allowance', 'night_charges']

    booking_number = models.CharField(max_length=16, unique=True, db_index=True)
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name='bookings')
    driver = models.ForeignKey('Driver', on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings')
    cab_type = models.ForeignKey('CabType', on_delete=models.SET_NULL, null=True, blank=True)

    pickup_location = models.ForeignKey('City', on_delete=models.SET_NULL, null=True, blank=True, related_name='pickups')
    drop_location = models.ForeignKey('City', on_delete=models.SET_NULL, null=True, blank=True, related_name='drops')
    pickup_address = models.CharField(max_length=255)
    drop_address = models.CharField(max_length=255)
    journey_type = models.CharField(max_length=10, choices=JourneyType.CHOICES, default=JourneyType.ONE_WAY)
    pickup_date = models.DateField()
    pickup_time = models.CharField(max_length=5, default=BusinessRules.DEFAULT_PICKUP_TIME)
    return_date = models.DateField(null=True, blank=True)
    return_time = models.CharField(max_length=5, null=True, blank=True)
    distance = models.FloatField(default=0)
    duration = models.IntegerField(null=True, blank=True)

    passenger_name = models.CharField(max_length=100)
    passenger_email = models.EmailField()
    passenger_phone = models.CharField(max_length=15)
    additional_notes = models.TextField(null=True, blank=True)

    base_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    toll_charges = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    driver_allowance = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    night_charges = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    fare_breakdown = models.JSONField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=BookingStatus.CHOICES, default=BookingStatus.PENDING)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.CHOICES, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.CHOICES, null=True, blank=True)
    payment_id = models.CharField(max_length=128, null=True, blank=True)

    assigned_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    user_rating = models.JSONField(null=True, blank=True)
    driver_rating = models.JSONField(null=True, blank=True)

    refund_status = models.CharField(max_length=20, choices=RefundStatus.CHOICES, default=RefundStatus.NONE)
    refund_id = models.CharField(max_length=128, null=True, blank=True)
    refund_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    refund_processed_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'driver'], name='booking_status_driver_idx'),
            models.Index(fields=['user', '-created_at'], name='booking_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.booking_number} ({self.status})"

    def component_total(self):
        return sum((Decimal(getattr(self, field) or 0) for field in self.AMOUNT_FIELDS), Decimal('0'))

    @property
    def is_terminal(self):
        return self.status in BookingStatus.TERMINAL

    def has_consistent_driver(self):
        """Booking.driver is set iff the status requires one"""
        return (self.driver_id is not None) == (self.status in BookingStatus.WITH_DRIVER)
