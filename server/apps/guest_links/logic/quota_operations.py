"""Quota enforcement for guest uploads.

A guest batch is checked as a whole before anything is written: one
oversized file or one file too many rejects every file in the batch.

The upload count is read, checked and later incremented in separate
statements without a lock. Two concurrent batches against the same link
can both pass the check and overshoot ``max_file_uploads``.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from http import HTTPStatus
from typing import Final

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from server.apps.entries.exceptions import InvalidArgumentError
from server.apps.entries.infrastructure.identifiers import (
    expiration_from_days,
    mint_entry_id,
    normalize_note,
    parse_expiration_days,
)
from server.apps.entries.logic.entry_operations import store_entry
from server.apps.entries.models import Entry
from server.apps.entries.payloads import (
    MaterializedPayload,
    UploadPayload,
    materialize,
)
from server.apps.guest_links.logic.link_operations import get_guest_link
from server.apps.guest_links.messages import guest_message
from server.apps.guest_links.models import GuestLink

logger = logging.getLogger(__name__)

GUEST_NAME_PREFIX: Final = 'guest-'
_BYTES_PER_MB: Final = 1024 * 1024


class RejectionReason(StrEnum):
    """Why a guest batch was refused."""

    LINK_EXPIRED = 'link_expired'
    QUOTA_EXCEEDED = 'quota_exceeded'
    FILE_TOO_LARGE = 'file_too_large'


_STATUS_CODES: Final = {
    RejectionReason.LINK_EXPIRED: HTTPStatus.GONE,
    RejectionReason.QUOTA_EXCEEDED: HTTPStatus.TOO_MANY_REQUESTS,
    RejectionReason.FILE_TOO_LARGE: HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
}


@dataclass(frozen=True, slots=True)
class GuestUploadRejection:
    """A batch refused by link policy. Nothing was written."""

    reason: RejectionReason
    remaining_uploads: int | None = None
    max_file_bytes: int | None = None
    filename: str | None = None

    @property
    def status_code(self) -> HTTPStatus:
        """HTTP status the rejection is answered with."""
        return _STATUS_CODES[self.reason]

    def message(self, lang: str | None = None) -> str:
        """Render a message for the guest.

        Args:
            lang: Language code, English by default.

        Returns:
            Localized explanation.
        """
        match self.reason:
            case RejectionReason.LINK_EXPIRED:
                return guest_message(lang, 'link_expired')
            case RejectionReason.QUOTA_EXCEEDED if not self.remaining_uploads:
                return guest_message(lang, 'upload_limit_reached')
            case RejectionReason.QUOTA_EXCEEDED:
                return guest_message(
                    lang,
                    'upload_limit_exceeded',
                    left=self.remaining_uploads,
                )
            case RejectionReason.FILE_TOO_LARGE:
                return guest_message(
                    lang,
                    'file_too_large',
                    name=self.filename,
                    max=round((self.max_file_bytes or 0) / _BYTES_PER_MB),
                )


@dataclass(frozen=True, slots=True)
class GuestUploadAccepted:
    """A batch stored in full."""

    entries: tuple[Entry, ...]

    @property
    def entry_ids(self) -> list[str]:
        """Ids of the created entries, in upload order."""
        return [entry.id for entry in self.entries]


def authorize_guest_upload(
    link: GuestLink,
    candidates: Sequence[MaterializedPayload],
    now: datetime | None = None,
) -> GuestUploadRejection | None:
    """Check a whole batch against the link's limits.

    Checks run in a fixed order: link expiry, upload count, then per-file
    size. The first failing check wins.

    Args:
        link: Guest link the batch is uploaded through.
        candidates: Every file of the batch, already named.
        now: Reference time, defaults to the current time.

    Returns:
        None if the batch may be stored, otherwise the rejection.
    """
    if link.is_expired(now):
        return GuestUploadRejection(reason=RejectionReason.LINK_EXPIRED)

    remaining = link.remaining_uploads
    if remaining is not None and (remaining <= 0 or len(candidates) > remaining):
        return GuestUploadRejection(
            reason=RejectionReason.QUOTA_EXCEEDED,
            remaining_uploads=remaining,
        )

    if link.max_file_bytes is not None:
        for candidate in candidates:
            if candidate.size > link.max_file_bytes:
                return GuestUploadRejection(
                    reason=RejectionReason.FILE_TOO_LARGE,
                    max_file_bytes=link.max_file_bytes,
                    filename=candidate.filename,
                )

    return None


def get_default_expiration_days() -> int | None:
    """Get the lifetime of guest uploads whose link sets none.

    Returns:
        Days from settings, or None if such uploads never expire.
    """
    return parse_expiration_days(
        getattr(settings, 'SHARING_DEFAULT_EXPIRATION_DAYS', None),
    )


def upload_as_guest(
    link_id: str,
    payloads: Sequence[UploadPayload],
    note: str | None = None,
    now: datetime | None = None,
) -> GuestUploadAccepted | GuestUploadRejection:
    """Store a guest batch if the link's limits allow it.

    Args:
        link_id: Guest link id.
        payloads: Files and pasted text of the batch.
        note: Note attached to every entry of the batch.
        now: Reference time, defaults to the current time.

    Returns:
        The created entries, or the rejection if nothing was stored.

    Raises:
        NotFoundError: If the link does not exist.
        InvalidArgumentError: If the batch is empty.
    """
    now = now or timezone.now()
    link = get_guest_link(link_id)

    candidates = [
        materialize(payload, mint_entry_id(), prefix=GUEST_NAME_PREFIX)
        for payload in payloads
    ]

    rejection = authorize_guest_upload(link, candidates, now=now)
    if rejection is not None:
        logger.warning(
            'Guest upload rejected on %s: %s (%d files)',
            link.id,
            rejection.reason,
            len(candidates),
        )
        return rejection

    if not candidates:
        raise InvalidArgumentError('file or pastedText is required')

    lifetime = link.max_file_lifetime_days or get_default_expiration_days()
    expiration_time = expiration_from_days(lifetime, now=now)
    note = normalize_note(note)

    entries = tuple(
        store_entry(
            candidate.entry_id,
            candidate.filename,
            candidate.content_type,
            candidate.data,
            note=note,
            expiration_time=expiration_time,
            guest_link_id=link.id,
        )
        for candidate in candidates
    )

    GuestLink.objects.filter(pk=link.id).update(
        upload_count=F('upload_count') + len(entries),
    )

    logger.info('Guest upload on %s: %d files', link.id, len(entries))
    return GuestUploadAccepted(entries=entries)
