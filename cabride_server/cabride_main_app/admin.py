from django.contrib import admin
from .models import Profile, City, Route, CabType, Driver, Booking, RatingRecord

# Customize admin site
admin.site.site_header = "CabRide Administration"
admin.site.site_title = "CabRide Admin"
admin.site.index_title = "Welcome to CabRide Admin Panel"


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'role', 'phone', 'ratings', 'total_ratings']
    list_filter = ['role']
    search_fields = ['user__username', 'user__email', 'phone']


@admin.register(City)
class CityAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'state', 'latitude', 'longitude', 'is_popular', 'active']
    list_filter = ['state', 'is_popular', 'active']
    search_fields = ['name', 'state']
    ordering = ['name']


@admin.register(Route)
class RouteAdmin(admin.ModelAdmin):
    list_display = ['id', 'source_city', 'destination_city', 'distance', 'estimated_time', 'toll_charges', 'active']
    list_filter = ['is_popular', 'active']
    search_fields = ['source_city__name', 'destination_city__name']
    autocomplete_fields = ['source_city', 'destination_city']


@admin.register(CabType)
class CabTypeAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'ac_type', 'base_km_price', 'extra_fare_per_km', 'included_km', 'active']
    list_filter = ['ac_type', 'active']
    search_fields = ['name']


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ['id', 'get_name', 'vehicle_number', 'vehicle_type', 'is_approved', 'is_available', 'current_booking_id', 'ratings', 'total_rides']
    list_filter = ['is_approved', 'is_available', 'vehicle_type']
    search_fields = ['name', 'user__username', 'license_number', 'vehicle_number']
    ordering = ['id']
    list_per_page = 50
    raw_id_fields = ['current_booking']

    def get_name(self, obj):
        return obj.display_name
    get_name.short_description = 'Name'


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['booking_number', 'user', 'driver', 'status', 'payment_status', 'pickup_date', 'total_amount', 'refund_status', 'created_at']
    list_filter = ['status', 'payment_status', 'refund_status', 'journey_type', 'created_at']
    search_fields = ['booking_number', 'passenger_name', 'passenger_email', 'passenger_phone', 'user__username']
    ordering = ['-created_at']
    date_hierarchy = 'pickup_date'
    list_per_page = 50
    readonly_fields = ['booking_number', 'created_at', 'updated_at', 'refund_id', 'refund_amount', 'refund_processed_at']
    raw_id_fields = ['user', 'driver']


@admin.register(RatingRecord)
class RatingRecordAdmin(admin.ModelAdmin):
    list_display = ['id', 'booking', 'rater_role', 'driver', 'user', 'rating', 'created_at']
    list_filter = ['rater_role', 'rating']
    raw_id_fields = ['booking', 'driver', 'user']
