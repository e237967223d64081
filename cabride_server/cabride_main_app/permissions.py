from rest_framework.permissions import BasePermission

from .utils.identity import is_admin, get_driver_for_user


class IsAdminRole(BasePermission):
    message = 'Admin access required'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsDriver(BasePermission):
    message = 'Driver access required'

    def has_permission(self, request, view):
        return get_driver_for_user(request.user) is not None
