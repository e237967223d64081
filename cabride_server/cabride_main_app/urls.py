from django.urls import path, include
from rest_framework import routers

from .views import (
    BookingViewSet, DriverViewSet, RatingViewSet, PaymentViewSet, DistanceViewSet, stripe_webhook,
)

router = routers.DefaultRouter()
router.register(r"booking", BookingViewSet, basename="booking")
router.register(r"drivers", DriverViewSet, basename="drivers")
router.register(r"ratings", RatingViewSet, basename="ratings")
router.register(r"payment", PaymentViewSet, basename="payment")
router.register(r"distance", DistanceViewSet, basename="distance")

urlpatterns = [
    path('', include(router.urls)),
    path('api-auth/', include('rest_framework.urls')),    # to login in rest_framework
    path('webhook/stripe/', stripe_webhook, name='stripe-webhook'),
]
