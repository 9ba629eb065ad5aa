# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for household member accounts.

    The first/last name pair is what group members see in member lists,
    chore assignments and payment shares.
    """

    list_display = [
        'email',
        'first_name',
        'last_name',
        'is_active',
        'is_staff',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'is_superuser',
        'created_at',
    ]

    search_fields = [
        'email',
        'first_name',
        'last_name',
    ]

    ordering = ['-created_at']

    # Remove username field references from BaseUserAdmin
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'first_name', 'last_name', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login']
