# users/permissions.py

from rest_framework.permissions import BasePermission

from users.models import User


# ---------------- BASE ROLE PERMISSION ----------------
class HasRole(BasePermission):
    """
    Grants access when the authenticated user's role is in allowed_roles.
    """

    allowed_roles = frozenset()

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return getattr(user, "role", None) in self.allowed_roles


# ---------------- ROLE PERMISSIONS ----------------
class IsAdmin(HasRole):
    allowed_roles = frozenset({User.ROLE_ADMIN})


class IsPOSUser(HasRole):
    """
    Anyone allowed to ring up sales at a till.
    """

    allowed_roles = frozenset({User.ROLE_ADMIN, User.ROLE_MANAGER, User.ROLE_CASHIER})


class IsManagerOrAdmin(HasRole):
    """Sales summaries and back-office reads."""

    allowed_roles = frozenset({User.ROLE_ADMIN, User.ROLE_MANAGER})
