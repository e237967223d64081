"""Rating history models"""
from django.db import models
from django.contrib.auth.models import User


class RatingRecord(models.Model):
    RATER_CHOICES = [
        ('user', 'User rated driver'),
        ('driver', 'Driver rated user'),
    ]

    booking = models.ForeignKey('Booking', on_delete=models.CASCADE, related_name='rating_records')
    rater_role = models.CharField(max_length=10, choices=RATER_CHOICES)
    driver = models.ForeignKey('Driver', on_delete=models.SET_NULL, null=True, related_name='rating_records')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='rating_records')
    rating = models.PositiveSmallIntegerField()
    comment = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['booking', 'rater_role']
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['driver', 'rater_role'], name='rating_driver_role_idx'),
            models.Index(fields=['user', 'rater_role'], name='rating_user_role_idx'),
        ]

    def __str__(self):
        return f"{self.rater_role} rating {self.rating} for booking {self.booking_id}"
