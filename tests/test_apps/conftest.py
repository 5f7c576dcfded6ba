"""Shared fixtures for app tests."""

import boto3
import pytest
from django.test import Client
from moto import mock_aws

from server.apps.entries.infrastructure.identifiers import (
    generate_id,
    mint_entry_id,
)
from server.apps.entries.logic.entry_operations import store_entry
from server.apps.entries.logic.expiration_operations import sweep_guard
from server.apps.guest_links.models import GuestLink

_TEST_SECRET = 'test-shared-secret'


@pytest.fixture(autouse=True)
def fresh_sweep_guard():
    """Re-arm the process-wide sweep guard around every test.

    Yields:
        The shared guard.
    """
    sweep_guard.reset()
    yield sweep_guard
    sweep_guard.reset()


@pytest.fixture
def swept_recently(fresh_sweep_guard):
    """Mark a sweep as just run so requests skip the piggybacked sweep.

    Returns:
        The shared guard.
    """
    fresh_sweep_guard.try_acquire(0)
    return fresh_sweep_guard


@pytest.fixture
def mock_s3(settings):
    """Mock S3 service with the configured bucket.

    Yields:
        boto3 S3 resource with the entries bucket created.
    """
    bucket_name = settings.STORAGES['default']['OPTIONS']['bucket_name']
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=bucket_name)
        yield conn


@pytest.fixture
def bucket(mock_s3, settings):
    """The mocked entries bucket.

    Returns:
        boto3 Bucket resource.
    """
    return mock_s3.Bucket(settings.STORAGES['default']['OPTIONS']['bucket_name'])


@pytest.fixture
def make_entry(db, mock_s3):
    """Factory storing an entry with its blob.

    Returns:
        Callable creating entries.
    """
    def factory(
        data=b'hello world',
        filename='hello.txt',
        content_type='text/plain',
        **kwargs,
    ):
        return store_entry(
            mint_entry_id(),
            filename,
            content_type,
            data,
            **kwargs,
        )
    return factory


@pytest.fixture
def make_guest_link(db):
    """Factory creating guest links.

    Returns:
        Callable creating guest links.
    """
    def factory(**kwargs):
        return GuestLink.objects.create(id=generate_id(), **kwargs)
    return factory


@pytest.fixture
def shared_secret(settings):
    """Configure the API shared secret.

    Returns:
        The configured secret.
    """
    settings.SHARING_SHARED_SECRET = _TEST_SECRET
    return _TEST_SECRET


@pytest.fixture
def api_client(shared_secret):
    """Test client sending the shared secret.

    Returns:
        Authorized Django test client.
    """
    return Client(headers={'Authorization': shared_secret})
