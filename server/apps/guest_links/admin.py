"""Django admin configuration for guest_links app."""


from django.contrib import admin

from server.apps.entries.admin import format_bytes
from server.apps.guest_links.models import GuestLink


@admin.register(GuestLink)
class GuestLinkAdmin(admin.ModelAdmin[GuestLink]):
    """Admin interface for GuestLink model."""

    list_display = [
        'id',
        'label',
        'max_file_size_display',
        'uploads_display',
        'max_file_lifetime_days',
        'url_expires',
        'created_time',
    ]

    list_filter = [
        'created_time',
        'url_expires',
    ]

    search_fields = [
        'id',
        'label',
    ]

    readonly_fields = [
        'id',
        'upload_count',
        'created_time',
    ]

    fieldsets = (
        ('Guest Link', {
            'fields': ('id', 'label', 'url_expires'),
        }),
        ('Limits', {
            'fields': (
                'max_file_bytes',
                'max_file_lifetime_days',
                'max_file_uploads',
            ),
        }),
        ('Usage', {
            'fields': ('upload_count', 'created_time'),
        }),
    )

    def max_file_size_display(self, obj: GuestLink) -> str:
        """Display the per-file size limit.

        Args:
            obj: GuestLink instance.

        Returns:
            Formatted size string or 'unlimited'.
        """
        if obj.max_file_bytes is None:
            return 'unlimited'
        return format_bytes(obj.max_file_bytes)
    max_file_size_display.short_description = 'Max file size'  # type: ignore[attr-defined]

    def uploads_display(self, obj: GuestLink) -> str:
        """Display used uploads against the limit.

        Args:
            obj: GuestLink instance.

        Returns:
            'used/max' string.
        """
        limit = obj.max_file_uploads if obj.max_file_uploads is not None else '∞'
        return f'{obj.upload_count}/{limit}'
    uploads_display.short_description = 'Uploads'  # type: ignore[attr-defined]
