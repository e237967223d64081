"""Location-related models"""
from django.db import models


class City(models.Model):
    name = models.CharField(max_length=64)
    state = models.CharField(max_length=64)
    country = models.CharField(max_length=64, default='India')
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    is_popular = models.BooleanField(default=False)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = 'cities'
        indexes = [models.Index(fields=['name'], name='city_name_idx')]

    def __str__(self):
        return f"{self.name}, {self.state}"

    @property
    def has_coordinates(self):
        return self.latitude is not None and self.longitude is not None


class Route(models.Model):
    """Authoritative road distance and toll data for a city pair"""
    source_city = models.ForeignKey(City, on_delete=models.CASCADE, related_name='routes_from')
    destination_city = models.ForeignKey(City, on_delete=models.CASCADE, related_name='routes_to')
    distance = models.FloatField()
    estimated_time = models.IntegerField(help_text='Minutes')
    base_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    toll_charges = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    is_popular = models.BooleanField(default=False)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['source_city', 'destination_city']

    def __str__(self):
        return f"{self.source_city.name} → {self.destination_city.name} ({self.distance} km)"

    @classmethod
    def between(cls, city_a, city_b):
        """Route for the pair in either direction, or None"""
        if city_a is None or city_b is None:
            return None
        route = cls.objects.filter(source_city=city_a, destination_city=city_b, active=True).first()
        if route is None:
            route = cls.objects.filter(source_city=city_b, destination_city=city_a, active=True).first()
        return route
