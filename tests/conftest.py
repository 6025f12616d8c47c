"""Shared fixtures for all tests."""

import boto3
import pytest
from django.contrib.auth import get_user_model
from moto import mock_aws

from server.apps.accounts.logic.identity import Identity
from server.apps.accounts.logic.tokens import issue_token
from server.apps.files.infrastructure.clients import scope_client

User = get_user_model()


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='test@example.com',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='other@example.com',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def bucket_name(settings):
    """Bucket configured for the default storage.

    Returns:
        Bucket name from STORAGES settings.
    """
    return settings.STORAGES['default']['OPTIONS']['bucket_name']


@pytest.fixture
def mock_s3(bucket_name):
    """Mock S3 service with the configured bucket.

    Yields:
        boto3 S3 resource with the bucket created.
    """
    with mock_aws():
        # Create S3 resource
        conn = boto3.resource('s3', region_name='us-east-1')

        # Create bucket
        conn.create_bucket(Bucket=bucket_name)

        yield conn


@pytest.fixture
def bucket(mock_s3, bucket_name):
    """Mocked bucket holding the stored objects.

    Returns:
        boto3 Bucket resource.
    """
    return mock_s3.Bucket(bucket_name)


@pytest.fixture
def scoped_client(user):
    """Data client scoped to the test user.

    Returns:
        ScopedClient for user.
    """
    return scope_client(Identity(user.id, user.email, 'test-token'))


@pytest.fixture
def other_scoped_client(other_user):
    """Data client scoped to the second user.

    Returns:
        ScopedClient for other_user.
    """
    return scope_client(
        Identity(other_user.id, other_user.email, 'other-token'),
    )


@pytest.fixture
def auth_headers(user):
    """Authorization header of a freshly logged-in test user.

    Returns:
        Extra kwargs for the Django test client.
    """
    raw_token, _ = issue_token(user)
    return {'HTTP_AUTHORIZATION': f'Bearer {raw_token}'}


@pytest.fixture
def other_auth_headers(other_user):
    """Authorization header of the second user.

    Returns:
        Extra kwargs for the Django test client.
    """
    raw_token, _ = issue_token(other_user)
    return {'HTTP_AUTHORIZATION': f'Bearer {raw_token}'}
