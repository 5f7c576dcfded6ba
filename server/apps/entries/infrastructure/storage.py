"""Blob storage backend for S3-compatible storage."""

import logging
from collections.abc import Iterable
from typing import Any, Final, final, override

from botocore.exceptions import BotoCoreError, ClientError
from django.core.files.base import ContentFile
from storages.backends.s3 import S3Storage
from storages.utils import clean_name

from server.apps.entries.exceptions import UpstreamFailureError

logger = logging.getLogger(__name__)

# Error codes S3-compatible services answer with for an absent key
_MISSING_KEY_CODES: Final = frozenset(('NoSuchKey', '404', 'NotFound'))


@final
class BlobStorage(S3Storage):
    """S3 storage backend keyed by entry id.

    Every object sits at the bucket root under the id of the entry it
    backs. On top of S3Storage this adds exact-key writes and reads,
    removal of a blob whose entry row could not be written, an
    idempotent delete, and the native multipart protocol used by
    chunked uploads.
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Write a single-shot entry blob, logging the outcome.

        Args:
            name: Entry id used as the object key.
            content: Entry content as a Django file.
            max_length: Optional maximum length for the key.

        Returns:
            Object key, equal to the entry id since overwrite is on.

        Raises:
            Exception: Whatever the S3 put raised.
        """
        try:
            saved_name = super().save(name, content, max_length)
            logger.info('Stored blob for entry %s', saved_name)
        except Exception:
            logger.exception('Could not store blob for entry %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete blob from S3, tolerating a key that is already gone.

        Args:
            name: Blob key to delete.

        Raises:
            Exception: If S3 delete fails for any other reason.
        """
        try:
            super().delete(name)
            logger.info('Deleted blob of entry %s', name)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_KEY_CODES:
                logger.warning('Blob of entry %s was already gone', name)
                return
            logger.exception('Could not delete blob of entry %s', name)
            raise
        except Exception:
            logger.exception('Could not delete blob of entry %s', name)
            raise

    def put_blob(self, key: str, data: bytes, content_type: str) -> str:
        """Store a whole object under an exact key.

        Args:
            key: Blob key (an entry id).
            data: Object content.
            content_type: MIME type recorded on the object.

        Returns:
            Key the object was stored under.
        """
        content = ContentFile(data, name=key)
        content.content_type = content_type  # type: ignore[attr-defined]
        return self.save(key, content)

    def read_blob(self, key: str) -> bytes:
        """Read a whole object.

        Args:
            key: Blob key.

        Returns:
            Object content.
        """
        with self.open(key, 'rb') as blob:
            return blob.read()

    def rollback_upload(self, name: str) -> None:
        """Remove the blob of an entry whose row insert failed.

        Never raises: the insert error is the one the caller reports.

        Args:
            name: Entry id of the unrecorded blob.
        """
        try:
            self.delete(name)
            logger.warning('Removed blob of unrecorded entry %s', name)
        except Exception:
            # The blob stays in storage without an entry row
            logger.exception('Blob of unrecorded entry %s left behind', name)

    def create_multipart_upload(self, key: str, content_type: str) -> str:
        """Open a multipart upload session for an object key.

        Args:
            key: Blob key the assembled object will be stored under.
            content_type: MIME type recorded on the object.

        Returns:
            Upload id issued by the blob store.

        Raises:
            UpstreamFailureError: If the blob store call fails.
        """
        try:
            response = self._client.create_multipart_upload(
                Bucket=self.bucket_name,
                Key=self._object_key(key),
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception('Failed to create multipart upload: %s', key)
            raise UpstreamFailureError(
                f'Could not start multipart upload for {key}',
            ) from exc

        upload_id = response['UploadId']
        logger.info('Multipart upload created: %s (%s)', key, upload_id[:8])
        return upload_id

    def resume_multipart_upload(
        self,
        key: str,
        upload_id: str,
    ) -> 'MultipartHandle':
        """Get a handle on an existing multipart upload session.

        Args:
            key: Blob key the session was created for.
            upload_id: Upload id issued at creation.

        Returns:
            Handle to upload parts, complete or abort the session.
        """
        return MultipartHandle(self, key, upload_id)

    @property
    def _client(self) -> Any:
        return self.bucket.meta.client

    def _object_key(self, name: str) -> str:
        return self._normalize_name(clean_name(name))


@final
class MultipartHandle:
    """Operations on one multipart upload session of the blob store."""

    def __init__(self, storage: BlobStorage, key: str, upload_id: str) -> None:
        """Initialize the handle.

        Args:
            storage: Storage backend owning the bucket.
            key: Blob key the session was created for.
            upload_id: Upload id issued by the blob store.
        """
        self._storage = storage
        self.key = key
        self.upload_id = upload_id

    def upload_part(self, part_number: int, data: bytes) -> str:
        """Upload one part.

        Args:
            part_number: Positive part number chosen by the client.
            data: Part content.

        Returns:
            ETag acknowledging the part.

        Raises:
            UpstreamFailureError: If the blob store call fails.
        """
        try:
            response = self._storage._client.upload_part(  # noqa: SLF001
                Bucket=self._storage.bucket_name,
                Key=self._storage._object_key(self.key),  # noqa: SLF001
                UploadId=self.upload_id,
                PartNumber=part_number,
                Body=data,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception(
                'Failed to upload part %d of %s',
                part_number,
                self.key,
            )
            raise UpstreamFailureError(
                f'Could not upload part {part_number} of {self.key}',
            ) from exc

        logger.debug(
            'Uploaded part %d of %s (%d bytes)',
            part_number,
            self.key,
            len(data),
        )
        return response['ETag']

    def complete(self, parts: Iterable[tuple[int, str]]) -> None:
        """Assemble the object from acknowledged parts.

        Args:
            parts: (part_number, etag) pairs in ascending part order.

        Raises:
            UpstreamFailureError: If the blob store call fails.
        """
        part_list = [
            {'PartNumber': part_number, 'ETag': etag}
            for part_number, etag in parts
        ]
        try:
            self._storage._client.complete_multipart_upload(  # noqa: SLF001
                Bucket=self._storage.bucket_name,
                Key=self._storage._object_key(self.key),  # noqa: SLF001
                UploadId=self.upload_id,
                MultipartUpload={'Parts': part_list},
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception('Failed to complete multipart upload: %s', self.key)
            raise UpstreamFailureError(
                f'Could not complete multipart upload of {self.key}',
            ) from exc

        logger.info(
            'Multipart upload completed: %s (%d parts)',
            self.key,
            len(part_list),
        )

    def abort(self) -> None:
        """Release the session and any stored parts.

        Raises:
            UpstreamFailureError: If the blob store call fails.
        """
        try:
            self._storage._client.abort_multipart_upload(  # noqa: SLF001
                Bucket=self._storage.bucket_name,
                Key=self._storage._object_key(self.key),  # noqa: SLF001
                UploadId=self.upload_id,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamFailureError(
                f'Could not abort multipart upload of {self.key}',
            ) from exc

        logger.info('Multipart upload aborted: %s', self.key)


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get('Error', {}).get('Code', ''))
