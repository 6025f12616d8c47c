"""Tests for the orphan ledger and its reconciliation."""

import pytest
from django.db import DatabaseError

from server.apps.files.infrastructure.clients import service_client
from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.logic.reconciliation import (
    reconcile_orphans,
    record_orphan,
)
from server.apps.files.models import File, OrphanedObject


def _fail(*args, **kwargs):
    raise RuntimeError('backend unavailable')


@pytest.mark.django_db
class TestRecordOrphan:
    """Tests for queueing orphans."""

    def test_creates_row(self, user):
        """Test first failure creates a ledger row."""
        orphan = record_orphan(
            key=f'{user.id}/1700000000000-a.txt',
            user_id=user.id,
            reason=OrphanedObject.Reason.DELETE_CLEANUP,
            error=RuntimeError('timeout'),
        )

        assert orphan is not None
        assert orphan.attempts == 1
        assert orphan.last_error == 'timeout'
        assert orphan.reason == OrphanedObject.Reason.DELETE_CLEANUP

    def test_repeat_bumps_attempts(self, user):
        """Test the same key is not queued twice."""
        key = f'{user.id}/1700000000000-a.txt'
        record_orphan(key, user.id, OrphanedObject.Reason.UPLOAD_ROLLBACK)

        orphan = record_orphan(
            key,
            user.id,
            OrphanedObject.Reason.UPLOAD_ROLLBACK,
            error=RuntimeError('again'),
        )

        assert OrphanedObject.objects.count() == 1
        assert orphan.attempts == 2
        assert orphan.last_error == 'again'

    def test_ledger_failure_is_swallowed(self, user, monkeypatch):
        """Test a broken ledger never masks the original error."""
        def failing_get_or_create(*args, **kwargs):
            raise DatabaseError('ledger unavailable')

        monkeypatch.setattr(
            OrphanedObject.objects,
            'get_or_create',
            failing_get_or_create,
        )

        orphan = record_orphan(
            f'{user.id}/x.txt',
            user.id,
            OrphanedObject.Reason.DELETE_CLEANUP,
        )

        assert orphan is None


@pytest.mark.django_db
class TestReconcileOrphans:
    """Tests for retrying orphan removal."""

    def test_removes_orphan(self, user, bucket, bucket_keys):
        """Test an orphaned object and its ledger row are removed."""
        key = f'{user.id}/1700000000000-left.txt'
        bucket.put_object(Key=key, Body=b'left behind')
        record_orphan(key, user.id, OrphanedObject.Reason.DELETE_CLEANUP)

        report = reconcile_orphans(service_client(), batch_size=10)

        assert report.removed == 1
        assert report.failed == 0
        assert bucket_keys() == set()
        assert not OrphanedObject.objects.exists()

    def test_already_gone_object(self, user, mock_s3):
        """Test a ledger row whose object vanished is cleared."""
        record_orphan(
            f'{user.id}/1700000000000-gone.txt',
            user.id,
            OrphanedObject.Reason.UPLOAD_ROLLBACK,
        )

        report = reconcile_orphans(service_client(), batch_size=10)

        assert report.removed == 1
        assert not OrphanedObject.objects.exists()

    def test_keeps_object_with_live_record(self, stored_file, bucket_keys):
        """Test an object that is backed by a record is never removed."""
        record_orphan(
            stored_file.storage_key,
            stored_file.user_id,
            OrphanedObject.Reason.UPLOAD_ROLLBACK,
        )

        report = reconcile_orphans(service_client(), batch_size=10)

        assert report.skipped == 1
        assert report.removed == 0
        assert stored_file.storage_key in bucket_keys()
        assert File.objects.filter(id=stored_file.id).exists()
        assert not OrphanedObject.objects.exists()

    def test_failure_keeps_row(self, user, bucket, monkeypatch):
        """Test a failed retry stays queued with its attempt counted."""
        key = f'{user.id}/1700000000000-stuck.txt'
        bucket.put_object(Key=key, Body=b'stuck')
        record_orphan(key, user.id, OrphanedObject.Reason.DELETE_CLEANUP)
        monkeypatch.setattr(FileStorage, 'delete', _fail)

        report = reconcile_orphans(service_client(), batch_size=10)

        assert report.failed == 1
        orphan = OrphanedObject.objects.get(key=key)
        assert orphan.attempts == 2
        assert orphan.last_error == 'backend unavailable'

    def test_batch_size(self, user, mock_s3):
        """Test only batch_size rows are processed, oldest first."""
        keys = [f'{user.id}/17000000000{index:02d}-a.txt' for index in range(3)]
        for key in keys:
            record_orphan(key, user.id, OrphanedObject.Reason.DELETE_CLEANUP)

        report = reconcile_orphans(service_client(), batch_size=2)

        assert report.removed == 2
        assert list(
            OrphanedObject.objects.values_list('key', flat=True),
        ) == [keys[2]]
