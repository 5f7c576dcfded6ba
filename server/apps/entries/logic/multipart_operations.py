"""Business logic for chunked (multipart) uploads.

A session bridges client-sliced chunks to the blob store's native
multipart API. The blob is assembled under the pre-allocated entry id,
and the entry row is written only after the blob store has completed
the object. A crash between those two steps leaves an orphaned blob
without an entry; nothing cleans it up.

The size declared at init is stored as the entry size and never
reconciled against the bytes actually received.
"""

import logging
from dataclasses import dataclass

from django.conf import settings

from server.apps.entries.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    UpstreamFailureError,
)
from server.apps.entries.infrastructure.identifiers import (
    expiration_from_days,
    mint_entry_id,
    normalize_filename,
    normalize_note,
    parse_declared_size,
    parse_expiration_days,
    parse_part_number,
)
from server.apps.entries.logic.entry_operations import get_storage
from server.apps.entries.models import Entry, MultipartUpload, MultipartUploadPart
from server.apps.entries.payloads import DEFAULT_CONTENT_TYPE

logger = logging.getLogger(__name__)

_DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class MultipartInit:
    """Handles returned to a client starting a chunked upload."""

    upload_id: str
    entry_id: str
    chunk_size: int


@dataclass(frozen=True, slots=True)
class CompletedUpload:
    """Entry materialized from a completed upload."""

    entry_id: str
    filename: str


@dataclass(frozen=True, slots=True)
class AbortResult:
    """Outcome of an abort.

    ``session_found`` is False for an unknown upload id (nothing to do).
    ``blob_released`` is False when the blob store release failed; the
    local session rows are deleted either way.
    """

    session_found: bool
    blob_released: bool


def get_chunk_size() -> int:
    """Get the chunk size advertised to clients.

    Returns:
        Chunk size in bytes from settings or default of 8 MiB.
    """
    return getattr(settings, 'SHARING_MULTIPART_CHUNK_SIZE', _DEFAULT_CHUNK_SIZE)


def get_upload(upload_id: str) -> MultipartUpload:
    """Get a multipart upload session.

    Args:
        upload_id: Upload id issued by the blob store.

    Returns:
        MultipartUpload instance.

    Raises:
        NotFoundError: If no such session exists.
    """
    try:
        return MultipartUpload.objects.get(upload_id=upload_id)
    except MultipartUpload.DoesNotExist as error:
        raise NotFoundError('multipart upload not found') from error


def init_upload(  # noqa: WPS211
    filename: str | None,
    content_type: str | None,
    declared_size: object,
    note: str | None = None,
    expiration_days: object = None,
) -> MultipartInit:
    """Start a chunked upload.

    Args:
        filename: Target filename, defaulted when blank.
        content_type: MIME type, defaulted when blank.
        declared_size: Size the client announces (not verified later).
        note: Optional note.
        expiration_days: Lifetime in days, missing means never expires.

    Returns:
        Upload id, pre-allocated entry id and chunk size.

    Raises:
        InvalidArgumentError: If the declared size is not a finite
            non-negative number.
        UpstreamFailureError: If the blob store refuses the session.
    """
    size = parse_declared_size(declared_size)
    entry_id = mint_entry_id()
    filename = normalize_filename(filename, fallback=f'upload-{entry_id}.bin')
    content_type = (content_type or '').strip() or DEFAULT_CONTENT_TYPE

    upload_id = get_storage().create_multipart_upload(entry_id, content_type)
    MultipartUpload.objects.create(
        upload_id=upload_id,
        entry_id=entry_id,
        filename=filename,
        content_type=content_type,
        size=size,
        expiration_time=expiration_from_days(
            parse_expiration_days(expiration_days),
        ),
        note=normalize_note(note),
    )

    logger.info(
        'Multipart upload started: %s for entry %s (%d bytes declared)',
        upload_id[:8],
        entry_id,
        size,
    )
    return MultipartInit(
        upload_id=upload_id,
        entry_id=entry_id,
        chunk_size=get_chunk_size(),
    )


def upload_part(upload_id: str, part_number: object, data: bytes) -> int:
    """Forward one chunk to the blob store and record its etag.

    Re-sending a part number replaces the stored etag, so a client can
    retry a failed chunk.

    Args:
        upload_id: Upload id issued at init.
        part_number: Positive part number chosen by the client.
        data: Chunk content.

    Returns:
        The acknowledged part number.

    Raises:
        InvalidArgumentError: If the part number is malformed.
        NotFoundError: If the session is unknown.
        UpstreamFailureError: If the blob store rejects the part.
    """
    number = parse_part_number(part_number)
    upload = get_upload(upload_id)

    handle = get_storage().resume_multipart_upload(
        upload.entry_id,
        upload.upload_id,
    )
    etag = handle.upload_part(number, data)

    MultipartUploadPart.objects.update_or_create(
        upload=upload,
        part_number=number,
        defaults={'etag': etag},
    )
    return number


def complete_upload(upload_id: str) -> CompletedUpload:
    """Assemble the uploaded parts and create the entry.

    Parts are submitted in ascending part number order, whatever order
    they arrived in.

    Args:
        upload_id: Upload id issued at init.

    Returns:
        Id and filename of the created entry.

    Raises:
        NotFoundError: If the session is unknown.
        InvalidArgumentError: If no part was acknowledged.
        UpstreamFailureError: If the blob store fails to assemble.
    """
    upload = get_upload(upload_id)
    parts = list(
        upload.parts.order_by('part_number').values_list('part_number', 'etag'),
    )
    if not parts:
        raise InvalidArgumentError('no uploaded parts found')

    # Step 1: Finalize the blob
    handle = get_storage().resume_multipart_upload(
        upload.entry_id,
        upload.upload_id,
    )
    handle.complete(parts)

    # Step 2: Materialize the entry from the stashed metadata
    entry = Entry.objects.create(
        id=upload.entry_id,
        filename=upload.filename,
        content_type=upload.content_type or DEFAULT_CONTENT_TYPE,
        size=upload.size,
        expiration_time=upload.expiration_time,
        note=upload.note,
    )

    # Step 3: Drop the session, parts cascade
    upload.delete()

    logger.info(
        'Multipart upload completed: %s -> entry %s (%d parts)',
        upload_id[:8],
        entry.id,
        len(parts),
    )
    return CompletedUpload(entry_id=entry.id, filename=entry.filename)


def abort_upload(upload_id: str) -> AbortResult:
    """Abandon a chunked upload.

    Aborting an unknown upload is a successful no-op. Releasing the blob
    store session is best-effort; the local rows are deleted regardless.

    Args:
        upload_id: Upload id issued at init.

    Returns:
        Whether a session existed and whether the blob store released it.
    """
    try:
        upload = get_upload(upload_id)
    except NotFoundError:
        logger.debug('Abort of unknown multipart upload: %s', upload_id[:8])
        return AbortResult(session_found=False, blob_released=False)

    blob_released = True
    try:
        get_storage().resume_multipart_upload(
            upload.entry_id,
            upload.upload_id,
        ).abort()
    except UpstreamFailureError:
        # Local cleanup still proceeds
        logger.exception(
            'Failed to release multipart upload in storage: %s',
            upload_id[:8],
        )
        blob_released = False

    upload.delete()

    logger.info('Multipart upload aborted: %s', upload_id[:8])
    return AbortResult(session_found=True, blob_released=blob_released)
