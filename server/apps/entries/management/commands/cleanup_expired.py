"""Management command to delete expired entries."""

from typing import Any, override

from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.entries.logic.entry_operations import expired_entry_ids
from server.apps.entries.logic.expiration_operations import (
    clamp_sweep_limit,
    get_sweep_limit,
    sweep_expired_entries,
)
from server.apps.entries.models import Entry


class Command(BaseCommand):
    """Run one expired entry sweep outside of request traffic."""

    help = 'Delete entries whose expiration time has passed'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--limit',
            type=int,
            default=None,
            help='Max entries to process, 1-1000 (default: from settings)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        now = timezone.now()
        limit = options['limit']
        if limit is None:
            limit = get_sweep_limit()

        self.stdout.write(f'Looking for entries expired before {now}')

        if options['dry_run']:
            self._report_dry_run(now, clamp_sweep_limit(limit))
            return

        result = sweep_expired_entries(now=now, limit=limit)
        for entry_id in result.failed_ids:
            self.stderr.write(f'Failed to delete {entry_id}')

        self.stdout.write(
            self.style.SUCCESS(
                f'Deleted {result.deleted_count} expired entries, '
                f'{len(result.failed_ids)} failed',
            ),
        )

    def _report_dry_run(self, now: Any, limit: int) -> None:
        entry_ids = expired_entry_ids(now, limit)
        entries = Entry.objects.in_bulk(entry_ids)
        for entry_id in entry_ids:
            entry = entries[entry_id]
            self.stdout.write(
                f'Would delete: {entry.id} ({entry.filename}, '
                f'expired: {entry.expiration_time})',
            )

        self.stdout.write(
            self.style.SUCCESS(f'Would delete {len(entry_ids)} expired entries'),
        )
