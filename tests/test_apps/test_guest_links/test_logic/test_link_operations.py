"""Tests for guest link management."""

from datetime import UTC, datetime

import pytest

from server.apps.entries.exceptions import NotFoundError
from server.apps.entries.infrastructure.identifiers import MAX_EXPIRATION_DAYS
from server.apps.entries.models import Entry
from server.apps.guest_links.logic.link_operations import (
    MAX_BYTES_LIMIT,
    MAX_COUNT_LIMIT,
    create_guest_link,
    delete_guest_link,
    get_guest_link,
    list_guest_links,
)
from server.apps.guest_links.models import GuestLink


@pytest.mark.django_db
class TestCreateGuestLink:
    """Tests for create_guest_link."""

    def test_create_with_limits(self):
        """Test all limits are stored."""
        link = create_guest_link(
            label='  Holiday photos  ',
            max_file_bytes=1024,
            max_file_lifetime_days='7',
            max_file_uploads=3,
            url_expires='2030-01-01T00:00:00Z',
        )

        assert len(link.id) == 10
        assert link.label == 'Holiday photos'
        assert link.max_file_bytes == 1024
        assert link.max_file_lifetime_days == 7
        assert link.max_file_uploads == 3
        assert link.url_expires == datetime(2030, 1, 1, tzinfo=UTC)
        assert link.upload_count == 0

    @pytest.mark.parametrize('limit', [None, 0, '0', '', 'abc', -5])
    def test_zero_or_blank_limits_mean_unlimited(self, limit):
        """Test zero, blank and junk limits are stored as unlimited."""
        link = create_guest_link(
            max_file_bytes=limit,
            max_file_lifetime_days=limit,
            max_file_uploads=limit,
        )

        assert link.max_file_bytes is None
        assert link.max_file_lifetime_days is None
        assert link.max_file_uploads is None

    @pytest.mark.parametrize('limit', [10**400, 1e300, '1e300', 2**70])
    def test_huge_limits_capped_at_column_range(self, limit):
        """Test oversized limits are capped instead of overflowing."""
        link = create_guest_link(
            max_file_bytes=limit,
            max_file_lifetime_days=limit,
            max_file_uploads=limit,
        )

        link.refresh_from_db()
        assert link.max_file_bytes == MAX_BYTES_LIMIT
        assert link.max_file_lifetime_days == MAX_EXPIRATION_DAYS
        assert link.max_file_uploads == MAX_COUNT_LIMIT

    def test_label_bounded(self):
        """Test label is cut to 120 characters and blank becomes None."""
        assert len(create_guest_link(label='x' * 200).label) == 120
        assert create_guest_link(label='   ').label is None

    def test_unparsable_expiry_means_never(self):
        """Test an invalid url_expires is dropped."""
        assert create_guest_link(url_expires='soon').url_expires is None


@pytest.mark.django_db
class TestGuestLinkLookup:
    """Tests for listing, reading and deleting guest links."""

    def test_list_newest_first(self):
        """Test links are listed newest first."""
        first = create_guest_link(label='first')
        second = create_guest_link(label='second')
        GuestLink.objects.filter(pk=first.id).update(
            created_time=datetime(2020, 1, 1, tzinfo=UTC),
        )

        assert [link.id for link in list_guest_links()] == [second.id, first.id]

    def test_get_missing(self):
        """Test unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            get_guest_link('missingid1')

    def test_delete_leaves_entries_dangling(self):
        """Test deleting a link keeps entries uploaded through it."""
        link = create_guest_link()
        Entry.objects.create(
            id='guestentry',
            filename='a',
            size=0,
            guest_link_id=link.id,
        )

        assert delete_guest_link(link.id)
        assert not delete_guest_link(link.id)
        assert Entry.objects.get(pk='guestentry').guest_link_id == link.id
