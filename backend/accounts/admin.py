from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "phone_number",
                    "first_name", "last_name", "is_active", "role")
    search_fields = ("username", "email", "phone_number", "badge_number")
    list_filter = ("is_active", "is_staff", "role")
    filter_horizontal = ("groups", "user_permissions")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("FraudLens", {"fields": ("phone_number", "role", "badge_number")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("FraudLens", {"fields": ("email", "phone_number",
                                  "first_name", "last_name", "role", "badge_number")}),
    )
