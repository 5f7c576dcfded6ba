"""Business logic for entry operations."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from django.core.files.storage import default_storage
from django.db.models import Count, OuterRef, QuerySet, Subquery, Sum
from django.db.models.functions import Coalesce

from server.apps.entries.exceptions import EntryExpiredError, NotFoundError
from server.apps.entries.infrastructure.identifiers import (
    expiration_from_days,
    mint_entry_id,
    normalize_filename,
    normalize_note,
    parse_expiration_days,
)
from server.apps.entries.models import DownloadEvent, Entry
from server.apps.entries.payloads import UploadPayload, materialize

if TYPE_CHECKING:
    from server.apps.entries.infrastructure.storage import BlobStorage

logger = logging.getLogger(__name__)

_USER_AGENT_MAX_LENGTH = 512


def get_storage() -> 'BlobStorage':
    """Get the configured default storage backend.

    Returns:
        BlobStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]


def store_entry(  # noqa: WPS211
    entry_id: str,
    filename: str,
    content_type: str,
    data: bytes,
    *,
    note: str | None = None,
    expiration_time: datetime | None = None,
    guest_link_id: str | None = None,
) -> Entry:
    """Write a blob and create its entry record.

    Transaction safety: Upload to storage first, then create DB record.
    If the DB insert fails, the uploaded blob is deleted (rollback).

    Args:
        entry_id: Id of the new entry, also the blob key.
        filename: Display filename.
        content_type: MIME type.
        data: Content.
        note: Optional note.
        expiration_time: When the entry expires, None for never.
        guest_link_id: Guest link the entry was uploaded through.

    Returns:
        Created Entry instance.
    """
    storage = get_storage()

    # Step 1: Upload to storage first
    storage.put_blob(entry_id, data, content_type)

    # Step 2: Create database record
    try:
        entry = Entry.objects.create(
            id=entry_id,
            filename=filename,
            content_type=content_type,
            size=len(data),
            expiration_time=expiration_time,
            note=note,
            guest_link_id=guest_link_id,
        )
    except Exception:
        logger.exception(
            'Database insert failed, rolling back storage upload: %s',
            entry_id,
        )
        storage.rollback_upload(entry_id)
        raise

    logger.info(
        'Entry created: %s (%s, %d bytes)',
        entry.id,
        entry.filename,
        entry.size,
    )
    return entry


def create_entry(
    payload: UploadPayload,
    *,
    note: str | None = None,
    expiration_days: object = None,
) -> Entry:
    """Upload a file or pasted text in a single shot.

    Args:
        payload: File or pasted text from an authenticated client.
        note: Optional note.
        expiration_days: Lifetime in days, missing or non-positive
            means the entry never expires.

    Returns:
        Created Entry instance.
    """
    item = materialize(payload, mint_entry_id())
    return store_entry(
        item.entry_id,
        item.filename,
        item.content_type,
        item.data,
        note=normalize_note(note),
        expiration_time=expiration_from_days(
            parse_expiration_days(expiration_days),
        ),
    )


def get_entry(entry_id: str) -> Entry:
    """Get entry by id.

    Args:
        entry_id: Entry id.

    Returns:
        Entry instance.

    Raises:
        NotFoundError: If no such entry exists.
    """
    try:
        return Entry.objects.get(pk=entry_id)
    except Entry.DoesNotExist as error:
        raise NotFoundError(f'entry {entry_id} not found') from error


def get_live_entry(entry_id: str, now: datetime | None = None) -> Entry:
    """Get an entry for download, deleting it if it has expired.

    Args:
        entry_id: Entry id.
        now: Reference time, defaults to the current time.

    Returns:
        Entry instance that has not expired.

    Raises:
        NotFoundError: If no such entry exists.
        EntryExpiredError: If the entry had expired (it is deleted).
    """
    entry = get_entry(entry_id)
    if entry.is_expired(now):
        logger.info('Expired entry accessed, deleting: %s', entry_id)
        delete_entry(entry_id)
        raise EntryExpiredError(f'entry {entry_id} expired')
    return entry


def list_entries() -> QuerySet[Entry]:
    """List all entries with their download counts.

    Returns:
        QuerySet of entries, newest first, annotated with download_count.
    """
    downloads = DownloadEvent.objects.filter(
        entry_id=OuterRef('pk'),
    ).order_by().values('entry_id').annotate(
        count=Count('pk'),
    ).values('count')

    return Entry.objects.annotate(
        download_count=Coalesce(Subquery(downloads), 0),
    ).order_by('-upload_time')


def update_entry(
    entry_id: str,
    *,
    filename: str | None = None,
    note: str | None = None,
    expiration_days: object = None,
) -> Entry:
    """Edit an entry's filename, note and expiration.

    A blank filename keeps the current one, a blank note clears it, and a
    missing or non-positive lifetime makes the entry never expire.

    Args:
        entry_id: Entry id.
        filename: New filename.
        note: New note.
        expiration_days: New lifetime in days, counted from now.

    Returns:
        Updated Entry instance.

    Raises:
        NotFoundError: If no such entry exists.
    """
    entry = get_entry(entry_id)
    entry.filename = normalize_filename(filename, fallback=entry.filename)
    entry.note = normalize_note(note)
    entry.expiration_time = expiration_from_days(
        parse_expiration_days(expiration_days),
    )
    entry.save(update_fields=['filename', 'note', 'expiration_time'])

    logger.info('Entry updated: %s', entry_id)
    return entry


def delete_entry(entry_id: str) -> None:
    """Delete an entry's blob, download events and record, in that order.

    A blob that is already missing counts as deleted.

    Args:
        entry_id: Entry id.
    """
    get_storage().delete(entry_id)
    DownloadEvent.objects.filter(entry_id=entry_id).delete()
    Entry.objects.filter(pk=entry_id).delete()
    logger.info('Entry deleted: %s', entry_id)


def expired_entry_ids(now: datetime, limit: int) -> list[str]:
    """Find entries whose expiration time has passed.

    Args:
        now: Reference time.
        limit: Maximum number of ids to return.

    Returns:
        Ids of expired entries, soonest expired first.
    """
    return list(
        Entry.objects.filter(
            expiration_time__isnull=False,
            expiration_time__lte=now,
        ).order_by('expiration_time').values_list('pk', flat=True)[:limit],
    )


def read_entry_content(entry: Entry) -> bytes:
    """Read an entry's content from the blob store.

    Args:
        entry: Entry to read.

    Returns:
        Blob content.
    """
    return get_storage().read_blob(entry.id)


def record_download(
    entry: Entry,
    ip: str | None = None,
    user_agent: str = '',
) -> DownloadEvent:
    """Record a download of an entry.

    Args:
        entry: Downloaded entry.
        ip: Client IP address.
        user_agent: Client user agent string.

    Returns:
        Created DownloadEvent.
    """
    return DownloadEvent.objects.create(
        entry_id=entry.id,
        ip=ip or None,
        user_agent=user_agent[:_USER_AGENT_MAX_LENGTH],
    )


def count_downloads(entry_id: str) -> int:
    """Count recorded downloads of an entry.

    Args:
        entry_id: Entry id.

    Returns:
        Number of download events.
    """
    return DownloadEvent.objects.filter(entry_id=entry_id).count()


def list_download_events(
    entry_id: str,
    unique_ips: bool = False,
) -> list[dict[str, Any]]:
    """List recorded downloads of an entry, newest first.

    Args:
        entry_id: Entry id.
        unique_ips: Collapse events to the latest one per client IP.

    Returns:
        Events as dicts with downloaded_at, ip and user_agent.
    """
    events = DownloadEvent.objects.filter(
        entry_id=entry_id,
    ).order_by('-downloaded_at', '-pk').values(
        'downloaded_at',
        'ip',
        'user_agent',
    )
    if not unique_ips:
        return list(events)

    # Newest first, so the first row seen per IP is its latest download
    latest: dict[str | None, dict[str, Any]] = {}
    for event in events:
        latest.setdefault(event['ip'], event)
    return list(latest.values())


def get_system_info() -> dict[str, Any]:
    """Summarize stored data.

    Returns:
        Total stored bytes and row counts.
    """
    from server.apps.guest_links.models import GuestLink  # noqa: WPS433

    totals = Entry.objects.aggregate(
        total=Sum('size', default=0),
        count=Count('pk'),
    )
    return {
        'upload_data_bytes': totals['total'],
        'db_entry_count': totals['count'],
        'db_guest_link_count': GuestLink.objects.count(),
        'download_count': DownloadEvent.objects.count(),
    }
