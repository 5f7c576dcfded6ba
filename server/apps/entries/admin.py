"""Django admin configuration for entries app.

Deletes go through the logic layer so blobs and blob-store sessions are
released together with their rows.
"""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.entries.logic.entry_operations import delete_entry
from server.apps.entries.logic.multipart_operations import abort_upload
from server.apps.entries.models import DownloadEvent, Entry, MultipartUpload


def format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(Entry)
class EntryAdmin(admin.ModelAdmin[Entry]):
    """Admin interface for Entry model."""

    list_display = [
        'id',
        'filename',
        'size_display',
        'content_type',
        'upload_time',
        'expiration_time',
        'guest_link_id',
    ]

    list_filter = [
        'content_type',
        'upload_time',
        'expiration_time',
    ]

    search_fields = [
        'id',
        'filename',
        'note',
        'guest_link_id',
    ]

    # Blob-backed fields are fixed once the object exists
    readonly_fields = [
        'id',
        'content_type',
        'size',
        'upload_time',
        'guest_link_id',
    ]

    fieldsets = (
        ('Entry', {
            'fields': ('id', 'filename', 'note'),
        }),
        ('Content', {
            'fields': ('content_type', 'size'),
        }),
        ('Lifecycle', {
            'fields': ('upload_time', 'expiration_time', 'guest_link_id'),
        }),
    )

    def size_display(self, obj: Entry) -> str:
        """Display entry size in human-readable format.

        Args:
            obj: Entry instance.

        Returns:
            Formatted size string.
        """
        return format_bytes(obj.size)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def delete_model(self, request: HttpRequest, obj: Entry) -> None:
        """Delete the entry's blob, download events and row."""
        delete_entry(obj.id)

    def delete_queryset(
        self,
        request: HttpRequest,
        queryset: QuerySet[Entry],
    ) -> None:
        """Delete selected entries one by one, blobs included."""
        for entry_id in list(queryset.values_list('pk', flat=True)):
            delete_entry(entry_id)


@admin.register(MultipartUpload)
class MultipartUploadAdmin(admin.ModelAdmin[MultipartUpload]):
    """Admin interface for in-progress chunked uploads."""

    list_display = [
        'entry_id',
        'filename',
        'declared_size_display',
        'part_count',
        'created_time',
    ]

    search_fields = [
        'entry_id',
        'filename',
        'upload_id',
    ]

    readonly_fields = [
        'upload_id',
        'entry_id',
        'size',
        'created_time',
    ]

    def declared_size_display(self, obj: MultipartUpload) -> str:
        """Display the client declared size.

        Args:
            obj: MultipartUpload instance.

        Returns:
            Formatted size string.
        """
        return format_bytes(obj.size)
    declared_size_display.short_description = 'Declared size'  # type: ignore[attr-defined]

    def part_count(self, obj: MultipartUpload) -> int:
        """Count of acknowledged parts.

        Args:
            obj: MultipartUpload instance.

        Returns:
            Number of parts received so far.
        """
        return obj.parts.count()
    part_count.short_description = 'Parts'  # type: ignore[attr-defined]

    def delete_model(self, request: HttpRequest, obj: MultipartUpload) -> None:
        """Abort the blob-store session, then drop the rows."""
        abort_upload(obj.upload_id)

    def delete_queryset(
        self,
        request: HttpRequest,
        queryset: QuerySet[MultipartUpload],
    ) -> None:
        """Abort every selected session."""
        for upload_id in list(queryset.values_list('pk', flat=True)):
            abort_upload(upload_id)


@admin.register(DownloadEvent)
class DownloadEventAdmin(admin.ModelAdmin[DownloadEvent]):
    """Admin interface for DownloadEvent model."""

    list_display = [
        'entry_id',
        'downloaded_at',
        'ip',
    ]

    list_filter = [
        'downloaded_at',
    ]

    search_fields = [
        'entry_id',
        'ip',
    ]

    readonly_fields = [
        'entry_id',
        'downloaded_at',
        'ip',
        'user_agent',
    ]
