"""Rating serializers"""
from rest_framework import serializers


class RateDriverSerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    driver_id = serializers.IntegerField()
    rating = serializers.IntegerField()
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class RateRiderSerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    user_id = serializers.IntegerField()
    rating = serializers.IntegerField()
    comment = serializers.CharField(required=False, allow_blank=True, default='')
