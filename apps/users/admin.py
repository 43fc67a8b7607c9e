from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        "email",
        "first_name",
        "last_name",
        "role",
        "is_active",
        "failed_login_attempts",
        "locked_until",
        "last_login",
    )
    list_filter = ("role", "is_staff", "is_superuser", "is_active")
    search_fields = ("email", "first_name", "last_name", "institution")
    ordering = ("email",)

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Personal info", {"fields": ("first_name", "last_name")}),
        ("Profile", {"fields": ("institution", "department", "specialization", "experience")}),
        (
            "Permissions",
            {
                "fields": (
                    "role",
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
        ("Security", {"fields": ("failed_login_attempts", "locked_until")}),
        ("Important dates", {"fields": ("last_login", "last_active_at", "date_joined")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "first_name", "last_name", "role", "password1", "password2"),
            },
        ),
    )
    readonly_fields = ("last_login", "last_active_at", "date_joined")
    actions = ["unlock_accounts"]

    @admin.action(description="Clear login lockout for selected users")
    def unlock_accounts(self, request, queryset):
        updated = queryset.update(failed_login_attempts=0, locked_until=None)
        self.message_user(request, f"Unlocked {updated} account(s).")
