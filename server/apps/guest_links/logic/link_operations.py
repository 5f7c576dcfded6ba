"""Business logic for guest link management."""

import logging
from datetime import datetime
from typing import Final

from django.db.models import QuerySet

from server.apps.entries.exceptions import NotFoundError
from server.apps.entries.infrastructure.identifiers import (
    MAX_EXPIRATION_DAYS,
    generate_id,
    parse_timestamp,
)
from server.apps.guest_links.models import LABEL_MAX_LENGTH, GuestLink

logger = logging.getLogger(__name__)

_MINT_ATTEMPTS = 5

# Column bounds of PositiveIntegerField and PositiveBigIntegerField
MAX_COUNT_LIMIT: Final = 2**31 - 1
MAX_BYTES_LIMIT: Final = 2**63 - 1


def _mint_link_id() -> str:
    for _ in range(_MINT_ATTEMPTS):
        candidate = generate_id()
        if not GuestLink.objects.filter(pk=candidate).exists():
            return candidate
    raise RuntimeError('Could not mint a unique guest link id')


def parse_optional_limit(
    raw: object,
    maximum: int = MAX_COUNT_LIMIT,
) -> int | None:
    """Parse a limit where missing, zero or junk means unlimited.

    Args:
        raw: Client input (number or numeric string).
        maximum: Largest value the column holds, larger input is capped.

    Returns:
        Positive limit, or None for unlimited.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(float(str(raw).strip()))
    except (OverflowError, ValueError):
        return None
    return min(value, maximum) if value > 0 else None


def create_guest_link(  # noqa: WPS211
    label: str | None = None,
    max_file_bytes: object = None,
    max_file_lifetime_days: object = None,
    max_file_uploads: object = None,
    url_expires: object = None,
) -> GuestLink:
    """Create a guest link.

    Args:
        label: Display label, trimmed to 120 characters.
        max_file_bytes: Per-file size limit, zero or blank for none.
        max_file_lifetime_days: Lifetime of uploaded files, zero or blank
            for the default, capped at MAX_EXPIRATION_DAYS.
        max_file_uploads: Total file count limit, zero or blank for none.
        url_expires: ISO 8601 time after which the link stops working.

    Returns:
        Created GuestLink instance.
    """
    if not isinstance(label, str):
        label = ''
    cleaned_label = label.strip()[:LABEL_MAX_LENGTH] or None
    expires: datetime | None
    if isinstance(url_expires, datetime):
        expires = url_expires
    else:
        expires = parse_timestamp(url_expires)

    link = GuestLink.objects.create(
        id=_mint_link_id(),
        label=cleaned_label,
        max_file_bytes=parse_optional_limit(max_file_bytes, MAX_BYTES_LIMIT),
        max_file_lifetime_days=parse_optional_limit(
            max_file_lifetime_days,
            MAX_EXPIRATION_DAYS,
        ),
        max_file_uploads=parse_optional_limit(max_file_uploads),
        url_expires=expires,
    )

    logger.info('Guest link created: %s (%s)', link.id, link.label or '-')
    return link


def list_guest_links() -> QuerySet[GuestLink]:
    """List guest links, newest first.

    Returns:
        QuerySet of guest links.
    """
    return GuestLink.objects.order_by('-created_time')


def get_guest_link(link_id: str) -> GuestLink:
    """Get guest link by id.

    Args:
        link_id: Guest link id.

    Returns:
        GuestLink instance.

    Raises:
        NotFoundError: If no such link exists.
    """
    try:
        return GuestLink.objects.get(pk=link_id)
    except GuestLink.DoesNotExist as error:
        raise NotFoundError('guest link not found') from error


def delete_guest_link(link_id: str) -> bool:
    """Delete a guest link.

    Entries uploaded through the link are kept; their guest_link_id is
    left dangling.

    Args:
        link_id: Guest link id.

    Returns:
        True if a link was deleted.
    """
    deleted, _ = GuestLink.objects.filter(pk=link_id).delete()
    if deleted:
        logger.info('Guest link deleted: %s', link_id)
    return bool(deleted)
