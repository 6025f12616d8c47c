"""Shared fixtures for files app tests."""

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from server.apps.files.models import File


@pytest.fixture
def text_upload():
    """Small allow-listed upload.

    Returns:
        SimpleUploadedFile named notes.txt.
    """
    return SimpleUploadedFile(
        'notes.txt',
        b'test file content',
        content_type='text/plain',
    )


@pytest.fixture
def stored_file(user, bucket):
    """Create a file record with its object in mock S3.

    Args:
        user: Test user fixture.
        bucket: Mocked bucket fixture.

    Returns:
        File instance.
    """
    name = '1700000000000-report.pdf'
    bucket.put_object(
        Key=f'{user.id}/{name}',
        Body=b'%PDF-1.4 test',
    )
    return File.objects.create(
        user=user,
        name=name,
        size=13,
        mime_type='application/pdf',
    )


@pytest.fixture
def other_stored_file(other_user, bucket):
    """Create a file owned by the second user.

    Args:
        other_user: Second user fixture.
        bucket: Mocked bucket fixture.

    Returns:
        File instance.
    """
    name = '1700000000000-secret.txt'
    bucket.put_object(
        Key=f'{other_user.id}/{name}',
        Body=b'not yours',
    )
    return File.objects.create(
        user=other_user,
        name=name,
        size=9,
        mime_type='text/plain',
    )


@pytest.fixture
def bucket_keys(bucket):
    """Read the keys currently stored in the mocked bucket.

    Returns:
        Callable returning the set of keys.
    """
    def keys() -> set[str]:
        return {stored.key for stored in bucket.objects.all()}
    return keys
