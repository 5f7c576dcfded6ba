"""Tests for admin deletes of entries and chunked uploads."""

import pytest
from django.contrib import admin
from django.test import RequestFactory

from server.apps.entries.admin import format_bytes
from server.apps.entries.logic.entry_operations import record_download
from server.apps.entries.logic.multipart_operations import init_upload
from server.apps.entries.models import DownloadEvent, Entry, MultipartUpload


@pytest.fixture
def admin_request():
    """Bare request passed to admin delete hooks.

    Returns:
        POST request.
    """
    return RequestFactory().post('/')


def _pending_sessions(mock_s3, settings):
    listing = mock_s3.meta.client.list_multipart_uploads(
        Bucket=settings.STORAGES['default']['OPTIONS']['bucket_name'],
    )
    return listing.get('Uploads', [])


@pytest.mark.django_db
class TestEntryAdminDelete:
    """Tests for deleting entries from the admin."""

    def test_delete_model_removes_blob(self, make_entry, bucket, admin_request):
        """Test deleting one entry drops its blob and download events."""
        entry = make_entry()
        record_download(entry, ip='10.0.0.1')
        model_admin = admin.site._registry[Entry]  # noqa: SLF001

        model_admin.delete_model(admin_request, entry)

        assert not Entry.objects.filter(pk=entry.id).exists()
        assert not DownloadEvent.objects.filter(entry_id=entry.id).exists()
        assert list(bucket.objects.all()) == []

    def test_delete_queryset_removes_blobs(
        self,
        make_entry,
        bucket,
        admin_request,
    ):
        """Test the bulk action drops every selected blob."""
        make_entry(data=b'one')
        make_entry(data=b'two')
        kept = make_entry(data=b'three')
        model_admin = admin.site._registry[Entry]  # noqa: SLF001

        model_admin.delete_queryset(
            admin_request,
            Entry.objects.exclude(pk=kept.id),
        )

        assert list(Entry.objects.values_list('pk', flat=True)) == [kept.id]
        assert [blob.key for blob in bucket.objects.all()] == [kept.id]


@pytest.mark.django_db
class TestMultipartUploadAdminDelete:
    """Tests for deleting chunked uploads from the admin."""

    def test_delete_model_aborts_session(
        self,
        mock_s3,
        settings,
        admin_request,
    ):
        """Test deleting a session also aborts it in the blob store."""
        started = init_upload('big.bin', None, 10)
        upload = MultipartUpload.objects.get(upload_id=started.upload_id)
        assert len(_pending_sessions(mock_s3, settings)) == 1
        model_admin = admin.site._registry[MultipartUpload]  # noqa: SLF001

        model_admin.delete_model(admin_request, upload)

        assert MultipartUpload.objects.count() == 0
        assert _pending_sessions(mock_s3, settings) == []

    def test_delete_queryset_aborts_sessions(
        self,
        mock_s3,
        settings,
        admin_request,
    ):
        """Test the bulk action aborts every selected session."""
        init_upload('a.bin', None, 10)
        init_upload('b.bin', None, 10)
        model_admin = admin.site._registry[MultipartUpload]  # noqa: SLF001

        model_admin.delete_queryset(
            admin_request,
            MultipartUpload.objects.all(),
        )

        assert MultipartUpload.objects.count() == 0
        assert _pending_sessions(mock_s3, settings) == []


@pytest.mark.parametrize(('size', 'expected'), [
    (512, '512 B'),
    (1536, '1.5 KB'),
    (5 * 1024 * 1024, '5.0 MB'),
    (3 * 1024 * 1024 * 1024, '3.0 GB'),
])
def test_format_bytes(size, expected):
    """Test sizes are shown with the largest fitting unit."""
    assert format_bytes(size) == expected
