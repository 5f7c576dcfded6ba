"""Database models for entries app."""

from typing import ClassVar, Final, final, override

from django.db import models
from django.utils import timezone

# Constants for field max lengths
ENTRY_ID_LENGTH: Final = 10
FILENAME_MAX_LENGTH: Final = 255
NOTE_MAX_LENGTH: Final = 1000
_CONTENT_TYPE_MAX_LENGTH: Final = 255
_UPLOAD_ID_MAX_LENGTH: Final = 1024  # Blob store issued, opaque
_ETAG_MAX_LENGTH: Final = 255
_USER_AGENT_MAX_LENGTH: Final = 512


@final
class Entry(models.Model):
    """A stored file or pasted text object.

    The entry id doubles as the blob key: a row exists exactly when an
    object with key ``id`` exists in the blob store. The only exception
    is the window inside multipart completion between finalizing the blob
    and inserting this row.
    """

    id = models.CharField(
        primary_key=True,
        max_length=ENTRY_ID_LENGTH,
        help_text='Opaque random id, also the blob key',
    )

    filename = models.CharField(max_length=FILENAME_MAX_LENGTH)

    content_type = models.CharField(
        max_length=_CONTENT_TYPE_MAX_LENGTH,
        default='application/octet-stream',
    )

    size = models.PositiveBigIntegerField(help_text='Size in bytes')

    upload_time = models.DateTimeField(default=timezone.now)

    expiration_time = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text='Empty means the entry never expires',
    )

    note = models.CharField(
        max_length=NOTE_MAX_LENGTH,
        null=True,
        blank=True,
    )

    # Lookup only: deleting a guest link keeps this as a dangling reference
    guest_link_id = models.CharField(
        max_length=ENTRY_ID_LENGTH,
        null=True,
        blank=True,
        db_index=True,
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'Entry'  # type: ignore[mutable-override]
        verbose_name_plural = 'Entries'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-upload_time']

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=models.Q(size__gte=0),
                name='entries_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.id}:{self.filename}'

    def is_expired(self, now=None) -> bool:
        """Check whether the entry's lifetime has elapsed.

        Args:
            now: Reference time, defaults to the current time.

        Returns:
            True if an expiration time is set and not in the future.
        """
        if self.expiration_time is None:
            return False
        return self.expiration_time <= (now or timezone.now())


@final
class DownloadEvent(models.Model):
    """One recorded download of an entry."""

    # Plain id so events can outlive a failed entry delete
    entry_id = models.CharField(max_length=ENTRY_ID_LENGTH, db_index=True)

    downloaded_at = models.DateTimeField(default=timezone.now)

    ip = models.GenericIPAddressField(null=True, blank=True)

    user_agent = models.CharField(
        max_length=_USER_AGENT_MAX_LENGTH,
        blank=True,
        default='',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'Download Event'  # type: ignore[mutable-override]
        verbose_name_plural = 'Download Events'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-downloaded_at']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.entry_id}@{self.downloaded_at:%Y-%m-%d %H:%M:%S}'


@final
class MultipartUpload(models.Model):
    """Transient state of a chunked upload that becomes an Entry.

    Stashes everything needed to materialize the entry once the blob
    store has assembled the parts. Sessions a client abandons are never
    reaped automatically.
    """

    upload_id = models.CharField(
        primary_key=True,
        max_length=_UPLOAD_ID_MAX_LENGTH,
        help_text='Issued by the blob store multipart API',
    )

    entry_id = models.CharField(
        max_length=ENTRY_ID_LENGTH,
        unique=True,
        help_text='Pre-allocated id of the entry to create',
    )

    filename = models.CharField(max_length=FILENAME_MAX_LENGTH)

    content_type = models.CharField(max_length=_CONTENT_TYPE_MAX_LENGTH)

    size = models.PositiveBigIntegerField(
        default=0,
        help_text='Client declared size, never checked against parts',
    )

    expiration_time = models.DateTimeField(null=True, blank=True)

    note = models.CharField(
        max_length=NOTE_MAX_LENGTH,
        null=True,
        blank=True,
    )

    created_time = models.DateTimeField(default=timezone.now)

    class Meta:
        """Model metadata."""

        verbose_name = 'Multipart Upload'  # type: ignore[mutable-override]
        verbose_name_plural = 'Multipart Uploads'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_time']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.entry_id}:{self.filename} ({self.upload_id[:8]})'


@final
class MultipartUploadPart(models.Model):
    """An acknowledged chunk of a multipart upload."""

    upload = models.ForeignKey(
        MultipartUpload,
        on_delete=models.CASCADE,
        related_name='parts',
    )

    part_number = models.PositiveIntegerField()

    etag = models.CharField(
        max_length=_ETAG_MAX_LENGTH,
        help_text='Integrity token returned by the blob store',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'Multipart Upload Part'  # type: ignore[mutable-override]
        verbose_name_plural = 'Multipart Upload Parts'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['part_number']

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=['upload', 'part_number'],
                name='multipart_parts_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.upload_id[:8]}#{self.part_number}'
