"""Database models for guest_links app."""

from datetime import datetime
from typing import ClassVar, Final, final, override

from django.db import models
from django.utils import timezone

from server.apps.entries.models import ENTRY_ID_LENGTH

LABEL_MAX_LENGTH: Final = 120


@final
class GuestLink(models.Model):
    """Capability URL letting anonymous users upload under limits.

    Every limit is optional; an empty limit means unlimited.
    """

    id = models.CharField(
        primary_key=True,
        max_length=ENTRY_ID_LENGTH,
    )

    label = models.CharField(
        max_length=LABEL_MAX_LENGTH,
        null=True,
        blank=True,
    )

    max_file_bytes = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text='Per-file size limit in bytes',
    )

    max_file_lifetime_days = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text='Lifetime of uploaded files in days',
    )

    max_file_uploads = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text='Total number of files the link accepts',
    )

    url_expires = models.DateTimeField(
        null=True,
        blank=True,
        help_text='After this time the link rejects uploads',
    )

    created_time = models.DateTimeField(default=timezone.now)

    # Only ever incremented
    upload_count = models.PositiveIntegerField(default=0)

    class Meta:
        """Model metadata."""

        verbose_name = 'Guest Link'  # type: ignore[mutable-override]
        verbose_name_plural = 'Guest Links'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_time']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.id}:{self.label or "-"}'

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the link itself has expired.

        Args:
            now: Reference time, defaults to the current time.

        Returns:
            True if url_expires is set and not in the future.
        """
        if self.url_expires is None:
            return False
        return self.url_expires <= (now or timezone.now())

    @property
    def remaining_uploads(self) -> int | None:
        """Uploads left before the link is exhausted, None if unlimited."""
        if self.max_file_uploads is None:
            return None
        return max(0, self.max_file_uploads - self.upload_count)
