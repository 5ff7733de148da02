from rest_framework import permissions


def _role(request):
    return getattr(request.user, 'role', None)


class IsAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and (_role(request) == 'admin' or request.user.is_superuser)


class IsAdminOrReceptionist(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and _role(request) in ['admin', 'receptionist']


class IsDoctor(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and _role(request) == 'doctor'


class IsClinicStaff(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and _role(request) in ['admin', 'receptionist', 'doctor']


class IsAdminOrReadOnly(permissions.BasePermission):
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return request.user.is_authenticated
        return IsAdmin().has_permission(request, view)
