# ==========================================
# apps/logbook/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import LogEntry, Bundle, BundleStatus
from .services import delete_bundle


STATUS_COLORS = {
    BundleStatus.SUBMITTED: ('#ffc107', '#2C1810'),
    BundleStatus.PAID: ('#28a745', 'white'),
}


def _badge(text, bg, fg):
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        bg, fg, text
    )


class LogEntryInline(admin.TabularInline):
    """Inline admin for the entries locked into a bundle."""
    model = LogEntry
    extra = 0
    fields = ['start', 'end', 'hours', 'note']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        """Entries are attached by the bundle allocator only."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Bundle)
class BundleAdmin(admin.ModelAdmin):
    """
    Admin interface for RMP bundles.

    Deleting a bundle here goes through the same release-and-merge flow as
    the API, so entries are never lost or left fragmented.
    """

    list_display = [
        'filed_date',
        'user',
        'status_badge',
        'get_total_hours',
        'created_at',
    ]
    list_filter = ['status', 'filed_date']
    search_fields = ['user__email', 'user__display_name', 'notes']
    readonly_fields = ['user', 'notes', 'created_at', 'updated_at']
    inlines = [LogEntryInline]
    date_hierarchy = 'filed_date'
    ordering = ['-filed_date', '-created_at']
    actions = ['mark_paid', 'mark_submitted']

    def status_badge(self, obj):
        bg, fg = STATUS_COLORS.get(obj.status, ('#ccc', '#666'))
        return _badge(obj.get_status_display(), bg, fg)
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def get_total_hours(self, obj):
        return obj.total_hours()
    get_total_hours.short_description = 'Hours'

    def has_add_permission(self, request):
        """Bundles are created by the bundle allocator only."""
        return False

    def delete_model(self, request, obj):
        delete_bundle(user=obj.user, bundle_id=obj.id)

    def delete_queryset(self, request, queryset):
        for bundle in queryset.select_related('user'):
            delete_bundle(user=bundle.user, bundle_id=bundle.id)

    @admin.action(description='Mark selected RMPs as paid')
    def mark_paid(self, request, queryset):
        count = queryset.update(status=BundleStatus.PAID)
        self.message_user(request, f'Marked {count} RMP(s) as paid.')

    @admin.action(description='Mark selected RMPs as submitted')
    def mark_submitted(self, request, queryset):
        count = queryset.update(status=BundleStatus.SUBMITTED)
        self.message_user(request, f'Marked {count} RMP(s) as submitted.')


@admin.register(LogEntry)
class LogEntryAdmin(admin.ModelAdmin):
    """Admin interface for log entries; bundled entries are read-only."""

    list_display = ['start', 'end', 'hours', 'user', 'lock_badge', 'note']
    list_filter = ['start']
    search_fields = ['user__email', 'note']
    readonly_fields = ['bundle', 'created_at', 'updated_at']
    date_hierarchy = 'start'
    ordering = ['-start']

    def lock_badge(self, obj):
        if obj.is_locked:
            return _badge('Bundled', '#6c757d', 'white')
        return _badge('Open', '#002447', 'white')
    lock_badge.short_description = 'State'

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.is_locked:
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_locked:
            return False
        return super().has_delete_permission(request, obj)
