"""
Places Admin - venue submissions.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Venue, VenueStatus

STATUS_COLORS = {
    VenueStatus.PENDING: 'orange',
    VenueStatus.APPROVED: 'green',
    VenueStatus.REJECTED: 'red',
}


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ['name', 'address', 'status_badge', 'user', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'address']
    raw_id_fields = ['user']
    readonly_fields = ['id', 'created_at', 'updated_at']
    actions = ['approve_selected', 'reject_selected']

    def status_badge(self, obj):
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            STATUS_COLORS.get(obj.status, 'gray'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'

    @admin.action(description='Approve selected places')
    def approve_selected(self, request, queryset):
        updated = queryset.filter(status=VenueStatus.PENDING).update(status=VenueStatus.APPROVED)
        self.message_user(request, f'{updated} place(s) approved.')

    @admin.action(description='Reject selected places')
    def reject_selected(self, request, queryset):
        updated = queryset.filter(status=VenueStatus.PENDING).update(status=VenueStatus.REJECTED)
        self.message_user(request, f'{updated} place(s) rejected.')
