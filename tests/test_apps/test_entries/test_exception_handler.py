"""Tests for the API error rendering."""

import pytest
from django.test import Client
from rest_framework import exceptions

from server.apps.entries.exception_handler import (
    first_error_message,
    sharing_exception_handler,
)
from server.apps.entries.exceptions import (
    EntryExpiredError,
    InvalidArgumentError,
    NotFoundError,
    UpstreamFailureError,
)


@pytest.mark.parametrize(('detail', 'expected'), [
    ('plain', 'plain'),
    (['first', 'second'], 'first'),
    ({'size': ['invalid file size']}, 'invalid file size'),
    ({'non_field_errors': [{'nested': ['deep']}]}, 'deep'),
    ([], ''),
    ({}, ''),
])
def test_first_error_message(detail, expected):
    """Test the first message is found at any depth."""
    assert first_error_message(detail) == expected


class TestSharingExceptionHandler:
    """Tests for sharing_exception_handler."""

    @pytest.mark.parametrize(('error', 'status'), [
        (InvalidArgumentError('invalid file size'), 400),
        (NotFoundError('entry not found'), 404),
        (EntryExpiredError('entry expired'), 410),
        (UpstreamFailureError('storage unavailable'), 502),
    ])
    def test_domain_errors(self, error, status):
        """Test domain errors keep their status and message."""
        response = sharing_exception_handler(error, {})

        assert response.status_code == status
        assert response.data == {'error': str(error)}

    def test_validation_error_flattened(self):
        """Test field errors collapse to the first message."""
        error = exceptions.ValidationError({
            'uploadId': ['uploadId is required'],
        })

        response = sharing_exception_handler(error, {})

        assert response.status_code == 400
        assert response.data == {'error': 'uploadId is required'}

    def test_not_authenticated(self):
        """Test authentication failures keep their status."""
        response = sharing_exception_handler(exceptions.NotAuthenticated(), {})

        assert response.status_code == 401
        assert list(response.data) == ['error']

    def test_unknown_errors_left_to_django(self):
        """Test errors DRF does not know are not answered here."""
        assert sharing_exception_handler(RuntimeError('boom'), {}) is None


@pytest.mark.django_db
class TestApiErrorResponses:
    """Tests for error bodies produced through the API."""

    def test_huge_declared_size_rejected(self, api_client, mock_s3, settings):
        """Test a size beyond what the database holds is a bad request."""
        response = api_client.post(
            '/api/entry/multipart/init',
            data='{"size": 1e300}',
            content_type='application/json',
        )

        assert response.status_code == 400
        assert response.json() == {'error': 'invalid file size'}
        pending = mock_s3.meta.client.list_multipart_uploads(
            Bucket=settings.STORAGES['default']['OPTIONS']['bucket_name'],
        )
        assert not pending.get('Uploads')

    def test_unauthorized_names_scheme(self, shared_secret):
        """Test a 401 tells the client which scheme to use."""
        response = Client().get('/api/system-info')

        assert response.status_code == 401
        assert response['WWW-Authenticate'] == 'SharedSecret'
        assert list(response.json()) == ['error']

    def test_huge_guest_limits_capped(self, api_client):
        """Test limits beyond the column range are stored at their maximum."""
        response = api_client.post(
            '/api/guest-links',
            data='{"max_file_bytes": 1e30, "max_file_uploads": 99999999999}',
            content_type='application/json',
        )

        assert response.status_code == 200
        listed = api_client.get('/api/guest-links').json()
        assert listed[0]['max_file_bytes'] == 2**63 - 1
        assert listed[0]['max_file_uploads'] == 2**31 - 1
