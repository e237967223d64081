"""Location and cab type serializers"""
from rest_framework import serializers
from ..models import City, Route, CabType


class CitySerializer(serializers.ModelSerializer):
    class Meta:
        model = City
        fields = ['id', 'name', 'state', 'country', 'latitude', 'longitude', 'is_popular']


class RouteSerializer(serializers.ModelSerializer):
    source_city = CitySerializer(read_only=True)
    destination_city = CitySerializer(read_only=True)

    class Meta:
        model = Route
        fields = ['id', 'source_city', 'destination_city', 'distance', 'estimated_time', 'base_price', 'toll_charges']


class CabTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = CabType
        fields = [
            'id', 'name', 'description', 'ac_type', 'seating_capacity', 'luggage_capacity',
            'base_km_price', 'extra_fare_per_km', 'included_km',
            'fuel_charges_included', 'fuel_charge', 'driver_charges_included', 'driver_charge',
            'night_charges_included', 'night_charge',
        ]


class DistanceRequestSerializer(serializers.Serializer):
    source = serializers.CharField()
    destination = serializers.CharField()
    journey_type = serializers.CharField(required=False, allow_blank=True)
    cab_type = serializers.CharField(required=False)
    pickup_time = serializers.CharField(required=False)
