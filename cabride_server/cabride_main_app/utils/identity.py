"""Caller identity helpers - roles resolved from the auth user"""
from ..models import Driver
from .constants import UserRole


def get_role(user):
    if user is None or not user.is_authenticated:
        return None
    if user.is_staff:
        return UserRole.ADMIN
    profile = getattr(user, 'profile', None)
    return profile.role if profile else UserRole.USER


def is_admin(user):
    return get_role(user) == UserRole.ADMIN


def get_driver_for_user(user):
    """Driver record linked to this user, or None"""
    if user is None or not user.is_authenticated:
        return None
    return Driver.objects.filter(user=user).first()
