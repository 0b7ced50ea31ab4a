# users/admin.py

"""
Staff accounts in Django Admin.

Managers create cashier logins here; the role column decides which POS
endpoints a login can reach (see users/permissions.py).
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from users.models import User


@admin.register(User)
class StaffUserAdmin(DjangoUserAdmin):
    ordering = ("role", "email")
    list_display = ("email", "till_name", "role", "is_active", "last_login")
    list_filter = ("role", "is_active")
    search_fields = ("email", "username", "first_name", "last_name")
    readonly_fields = ("last_login", "created_at", "updated_at")

    fieldsets = (
        ("Login", {"fields": ("email", "username", "password")}),
        ("Till", {"fields": ("first_name", "last_name", "role")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Audit", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            "New staff member",
            {
                "classes": ("wide",),
                "fields": ("email", "first_name", "last_name", "role", "password1", "password2"),
            },
        ),
    )

    @admin.display(description="Printed as")
    def till_name(self, obj: User) -> str:
        return obj.display_name
