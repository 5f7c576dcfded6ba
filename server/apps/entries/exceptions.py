"""Exceptions for entries app.

Each error carries the HTTP-style status code the API answers with.
"""

from http import HTTPStatus


class SharingError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class NotFoundError(SharingError):
    """Raised for an unknown entry, upload session or guest link."""

    status_code = HTTPStatus.NOT_FOUND


class InvalidArgumentError(SharingError):
    """Raised for malformed input (part number, size, empty batch)."""

    status_code = HTTPStatus.BAD_REQUEST


class EntryExpiredError(SharingError):
    """Raised when an entry is accessed after its expiration time."""

    status_code = HTTPStatus.GONE


class UpstreamFailureError(SharingError):
    """Raised when the blob store rejects or fails a call.

    The original botocore error is kept as ``__cause__``.
    """

    status_code = HTTPStatus.BAD_GATEWAY
