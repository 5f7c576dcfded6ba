"""Tests for entry operations business logic."""

from datetime import timedelta

import pytest
from botocore.exceptions import ClientError
from django.utils import timezone

from server.apps.entries.exceptions import EntryExpiredError, NotFoundError
from server.apps.entries.logic import entry_operations
from server.apps.entries.logic.entry_operations import (
    count_downloads,
    create_entry,
    delete_entry,
    expired_entry_ids,
    get_entry,
    get_live_entry,
    get_system_info,
    list_download_events,
    list_entries,
    read_entry_content,
    record_download,
    store_entry,
    update_entry,
)
from server.apps.entries.models import DownloadEvent, Entry
from server.apps.entries.payloads import FileUpload, PastedText


@pytest.mark.django_db
class TestStoreEntry:
    """Tests for store_entry (blob first, then row)."""

    def test_store_writes_blob_and_row(self, mock_s3, bucket):
        """Test both the blob and the row exist afterwards."""
        entry = store_entry('abcdefghij', 'a.txt', 'text/plain', b'abc')

        assert entry.size == 3
        assert Entry.objects.filter(pk='abcdefghij').exists()
        assert bucket.Object('abcdefghij').get()['Body'].read() == b'abc'

    def test_db_failure_rolls_back_blob(self, mock_s3, bucket, monkeypatch):
        """Test a failed insert deletes the uploaded blob."""
        def failing_create(**kwargs):
            raise RuntimeError('database down')

        monkeypatch.setattr(Entry.objects, 'create', failing_create)

        with pytest.raises(RuntimeError):
            store_entry('abcdefghij', 'a.txt', 'text/plain', b'abc')

        with pytest.raises(ClientError):
            bucket.Object('abcdefghij').load()


@pytest.mark.django_db
class TestCreateEntry:
    """Tests for create_entry."""

    def test_create_from_file(self, mock_s3):
        """Test uploading a named file."""
        entry = create_entry(
            FileUpload(filename='report.pdf', content_type='application/pdf', data=b'%PDF'),
            note='  quarterly  ',
            expiration_days='7',
        )

        assert entry.filename == 'report.pdf'
        assert entry.content_type == 'application/pdf'
        assert entry.note == 'quarterly'
        assert entry.expiration_time is not None
        assert entry.expiration_time - entry.upload_time > timedelta(days=6)

    def test_create_from_pasted_text(self, mock_s3):
        """Test pasted text is stored as a .txt entry."""
        entry = create_entry(PastedText(text='some notes'))

        assert entry.filename == f'paste-{entry.id}.txt'
        assert entry.content_type == 'text/plain'
        assert entry.size == len(b'some notes')
        assert read_entry_content(entry) == b'some notes'

    @pytest.mark.parametrize('days', [None, '', '0', '-1', 'never'])
    def test_no_expiration(self, mock_s3, days):
        """Test missing or non-positive lifetimes never expire."""
        entry = create_entry(PastedText(text='x'), expiration_days=days)

        assert entry.expiration_time is None


@pytest.mark.django_db
class TestReadEntries:
    """Tests for entry lookups."""

    def test_get_entry_not_found(self):
        """Test unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            get_entry('missingid1')

    def test_get_live_entry(self, make_entry):
        """Test a live entry is returned."""
        entry = make_entry()

        assert get_live_entry(entry.id) == entry

    def test_get_live_entry_deletes_expired(self, make_entry, bucket):
        """Test an expired entry is deleted on access."""
        entry = make_entry(expiration_time=timezone.now() - timedelta(minutes=1))

        with pytest.raises(EntryExpiredError):
            get_live_entry(entry.id)

        assert not Entry.objects.filter(pk=entry.id).exists()
        with pytest.raises(ClientError):
            bucket.Object(entry.id).load()

    def test_list_entries_with_download_counts(self, make_entry):
        """Test listing annotates download counts, newest first."""
        older = make_entry(filename='older.txt')
        Entry.objects.filter(pk=older.id).update(
            upload_time=timezone.now() - timedelta(hours=1),
        )
        newer = make_entry(filename='newer.txt')
        record_download(older, ip='10.0.0.1')
        record_download(older, ip='10.0.0.2')

        listed = list(list_entries())

        assert [entry.id for entry in listed] == [newer.id, older.id]
        assert listed[0].download_count == 0
        assert listed[1].download_count == 2


@pytest.mark.django_db
class TestUpdateEntry:
    """Tests for update_entry."""

    def test_update_all_fields(self, make_entry):
        """Test filename, note and lifetime are replaced."""
        entry = make_entry(note='old note')

        updated = update_entry(
            entry.id,
            filename=' renamed.txt ',
            note='new note',
            expiration_days=3,
        )

        assert updated.filename == 'renamed.txt'
        assert updated.note == 'new note'
        assert updated.expiration_time is not None

    def test_blank_filename_keeps_old_and_blank_note_clears(self, make_entry):
        """Test blank filename keeps the current one, blank note clears."""
        entry = make_entry(
            filename='keep.txt',
            note='drop me',
            expiration_time=timezone.now() + timedelta(days=1),
        )

        updated = update_entry(entry.id, filename='  ', note='')

        assert updated.filename == 'keep.txt'
        assert updated.note is None
        assert updated.expiration_time is None

    def test_update_missing_entry(self):
        """Test updating an unknown entry raises NotFoundError."""
        with pytest.raises(NotFoundError):
            update_entry('missingid1', filename='x')


@pytest.mark.django_db
class TestDeleteEntry:
    """Tests for delete_entry."""

    def test_delete_removes_blob_events_and_row(self, make_entry, bucket):
        """Test everything belonging to the entry is removed."""
        entry = make_entry()
        record_download(entry)

        delete_entry(entry.id)

        assert not Entry.objects.filter(pk=entry.id).exists()
        assert not DownloadEvent.objects.filter(entry_id=entry.id).exists()
        with pytest.raises(ClientError):
            bucket.Object(entry.id).load()

    def test_delete_with_missing_blob(self, make_entry, bucket):
        """Test a blob that is already gone does not block deletion."""
        entry = make_entry()
        bucket.Object(entry.id).delete()

        delete_entry(entry.id)

        assert not Entry.objects.filter(pk=entry.id).exists()

    def test_blob_failure_keeps_row(self, make_entry, monkeypatch):
        """Test the row survives when the blob delete fails."""
        entry = make_entry()
        record_download(entry)

        def failing_delete(name):
            raise RuntimeError('storage down')

        monkeypatch.setattr(entry_operations.get_storage(), 'delete', failing_delete)

        with pytest.raises(RuntimeError):
            delete_entry(entry.id)

        assert Entry.objects.filter(pk=entry.id).exists()
        assert count_downloads(entry.id) == 1


@pytest.mark.django_db
class TestExpiredEntryIds:
    """Tests for expired_entry_ids."""

    def test_boundary_and_order(self):
        """Test entries expiring at or before now are found, soonest first."""
        now = timezone.now()
        Entry.objects.create(
            id='expiredold',
            filename='a',
            size=0,
            expiration_time=now - timedelta(days=1),
        )
        Entry.objects.create(id='expiredtie', filename='b', size=0, expiration_time=now)
        Entry.objects.create(
            id='stillalive',
            filename='c',
            size=0,
            expiration_time=now + timedelta(seconds=1),
        )
        Entry.objects.create(id='neverexpir', filename='d', size=0)

        assert expired_entry_ids(now, limit=10) == ['expiredold', 'expiredtie']

    def test_limit(self):
        """Test the number of ids is bounded."""
        now = timezone.now()
        for index in range(3):
            Entry.objects.create(
                id=f'expired{index:03d}',
                filename='a',
                size=0,
                expiration_time=now - timedelta(minutes=index + 1),
            )

        assert expired_entry_ids(now, limit=2) == ['expired002', 'expired001']


@pytest.mark.django_db
class TestDownloadsAndInfo:
    """Tests for download tracking and system info."""

    def test_record_download_truncates_user_agent(self, make_entry):
        """Test long user agents are cut to 512 characters."""
        entry = make_entry()

        event = record_download(entry, ip='', user_agent='x' * 600)

        assert event.ip is None
        assert len(event.user_agent) == 512

    def test_list_download_events_unique_ips(self, make_entry):
        """Test events collapse to one per client address."""
        entry = make_entry()
        record_download(entry, ip='10.0.0.1', user_agent='first')
        record_download(entry, ip='10.0.0.1', user_agent='second')
        record_download(entry, ip='10.0.0.2', user_agent='other')

        assert len(list_download_events(entry.id)) == 3
        unique = list_download_events(entry.id, unique_ips=True)
        assert sorted(event['ip'] for event in unique) == ['10.0.0.1', '10.0.0.2']

    def test_unique_ips_report_latest_download(self, make_entry):
        """Test each address carries the time and agent of its last download."""
        entry = make_entry()
        now = timezone.now()
        DownloadEvent.objects.create(
            entry_id=entry.id,
            ip='10.0.0.1',
            user_agent='zzz-old',
            downloaded_at=now - timedelta(hours=1),
        )
        DownloadEvent.objects.create(
            entry_id=entry.id,
            ip='10.0.0.1',
            user_agent='aaa-new',
            downloaded_at=now,
        )

        unique = list_download_events(entry.id, unique_ips=True)

        assert len(unique) == 1
        assert unique[0]['user_agent'] == 'aaa-new'
        assert unique[0]['downloaded_at'] == now

    def test_system_info(self, make_entry, make_guest_link):
        """Test totals over stored data."""
        entry = make_entry(data=b'12345')
        make_entry(data=b'678')
        make_guest_link()
        record_download(entry)

        assert get_system_info() == {
            'upload_data_bytes': 8,
            'db_entry_count': 2,
            'db_guest_link_count': 1,
            'download_count': 1,
        }

    def test_system_info_empty(self):
        """Test totals on an empty database."""
        assert get_system_info()['upload_data_bytes'] == 0
