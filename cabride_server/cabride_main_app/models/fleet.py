"""Fleet-related models (CabType, Driver)"""
from django.db import models
from django.contrib.auth.models import User

from ..utils.constants import BusinessRules


class CabType(models.Model):
    AC_CHOICES = [
        ('AC', 'AC'),
        ('Non-AC', 'Non-AC'),
    ]

    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True, default='')
    ac_type = models.CharField(max_length=10, choices=AC_CHOICES, default='AC')
    seating_capacity = models.IntegerField(default=4)
    luggage_capacity = models.IntegerField(default=2)
    base_km_price = models.DecimalField(max_digits=8, decimal_places=2)
    extra_fare_per_km = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    included_km = models.IntegerField(default=0)
    fuel_charges_included = models.BooleanField(default=True)
    fuel_charge = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    driver_charges_included = models.BooleanField(default=True)
    driver_charge = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    night_charges_included = models.BooleanField(default=True)
    night_charge = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} ({self.ac_type})"


class Driver(models.Model):
    # Some drivers are registered without a login account
    user = models.OneToOneField(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='driver')
    name = models.CharField(max_length=100, null=True, blank=True)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=15, null=True, blank=True)
    license_number = models.CharField(max_length=32, unique=True)
    license_expiry = models.DateField(null=True, blank=True)
    vehicle_number = models.CharField(max_length=16, unique=True)
    vehicle_model = models.CharField(max_length=64, blank=True, default='')
    vehicle_type = models.ForeignKey(CabType, on_delete=models.SET_NULL, null=True, blank=True, related_name='drivers')
    is_approved = models.BooleanField(default=False)
    is_available = models.BooleanField(default=True)
    # No DB constraint: the reference may outlive its booking and is repaired on read
    current_booking = models.ForeignKey(
        'Booking',
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='+',
    )
    ratings = models.DecimalField(max_digits=3, decimal_places=2, default=0.00)
    total_rides = models.IntegerField(default=0)
    total_ratings = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['is_available', 'is_approved'], name='driver_avail_approved_idx')]

    def __str__(self):
        return f"{self.display_name} - {self.vehicle_number}"

    @property
    def display_name(self):
        if self.user_id and (self.user.get_full_name() or self.user.username):
            return self.user.get_full_name() or self.user.username
        return self.name or BusinessRules.UNKNOWN_DRIVER_NAME

    @property
    def contact_phone(self):
        if self.user_id and hasattr(self.user, 'profile') and self.user.profile.phone:
            return self.user.profile.phone
        return self.phone or BusinessRules.NOT_AVAILABLE

    def summary(self):
        """Denormalized driver details with placeholders for missing data"""
        return {
            'id': self.id,
            'name': self.display_name,
            'phone': self.contact_phone,
            'vehicle_type': self.vehicle_type.name if self.vehicle_type_id else 'Standard',
            'vehicle_model': self.vehicle_model or BusinessRules.UNKNOWN_VEHICLE_MODEL,
            'vehicle_number': self.vehicle_number or BusinessRules.NOT_AVAILABLE,
        }
