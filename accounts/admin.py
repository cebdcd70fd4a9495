"""
Accounts Admin - identities and profiles.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.utils.html import format_html

from .models import CustomUser, UserProfile


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    ordering = ['email']
    list_display = ['email', 'display_name', 'email_verified', 'is_staff', 'is_active', 'date_joined']
    list_filter = ['email_verified', 'is_staff', 'is_active']
    search_fields = ['email', 'display_name']
    readonly_fields = ['date_joined', 'last_login', 'auth_providers']
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Identity', {'fields': ('display_name', 'photo_url', 'email_verified', 'auth_providers')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Dates', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2'),
        }),
    )


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ['display_name', 'email', 'job_occupation', 'role_badge', 'is_banned', 'is_verified', 'created_at']
    list_filter = ['is_admin', 'is_banned', 'is_verified']
    search_fields = ['display_name', 'email', 'job_occupation']
    raw_id_fields = ['user']
    readonly_fields = ['created_at', 'updated_at']

    def role_badge(self, obj):
        color = 'green' if obj.is_admin else 'gray'
        label = 'Admin' if obj.is_admin else 'User'
        return format_html('<span style="color: {}; font-weight: bold;">{}</span>', color, label)
    role_badge.short_description = 'Role'
