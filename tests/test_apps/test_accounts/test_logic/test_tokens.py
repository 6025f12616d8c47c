"""Tests for bearer token lifecycle."""

from datetime import timedelta

import pytest
from django.utils import timezone

from server.apps.accounts.logic.tokens import (
    cleanup_expired_tokens,
    digest_token,
    get_active_token,
    get_token_ttl,
    issue_token,
    revoke_token,
)
from server.apps.accounts.models import AccessToken


class TestTokenConfig:
    """Tests for token configuration."""

    def test_get_token_ttl_default(self, settings):
        """Test default token lifetime."""
        del settings.ACCESS_TOKEN_TTL

        assert get_token_ttl() == 3600

    def test_get_token_ttl_from_settings(self, settings):
        """Test token lifetime from settings."""
        settings.ACCESS_TOKEN_TTL = 60

        assert get_token_ttl() == 60


def test_digest_token():
    """Test digest is a stable SHA256 hex string."""
    digest = digest_token('abc')

    assert digest == digest_token('abc')
    assert digest != digest_token('abd')
    assert len(digest) == 64


@pytest.mark.django_db
class TestIssueToken:
    """Tests for issue_token."""

    def test_issue_token(self, user):
        """Test only the digest is stored."""
        raw_token, access_token = issue_token(user)

        assert access_token.user == user
        assert access_token.token_digest == digest_token(raw_token)
        assert not AccessToken.objects.filter(token_digest=raw_token).exists()
        assert not access_token.is_expired()

    def test_tokens_are_unique(self, user):
        """Test every login gets its own token."""
        first, _ = issue_token(user)
        second, _ = issue_token(user)

        assert first != second
        assert AccessToken.objects.filter(user=user).count() == 2

    def test_expiry_from_ttl(self, user, settings):
        """Test expiry follows ACCESS_TOKEN_TTL."""
        settings.ACCESS_TOKEN_TTL = 120
        before = timezone.now()

        _, access_token = issue_token(user)

        assert access_token.expires_at >= before + timedelta(seconds=120)
        assert access_token.expires_at <= timezone.now() + timedelta(seconds=120)

    def test_issue_cleans_expired(self, user):
        """Test expired tokens are removed on login."""
        _, old_token = issue_token(user)
        AccessToken.objects.filter(id=old_token.id).update(
            expires_at=timezone.now() - timedelta(seconds=1),
        )

        issue_token(user)

        assert not AccessToken.objects.filter(id=old_token.id).exists()


@pytest.mark.django_db
class TestGetActiveToken:
    """Tests for get_active_token."""

    def test_valid_token(self, user):
        """Test lookup by raw value."""
        raw_token, access_token = issue_token(user)

        assert get_active_token(raw_token) == access_token

    def test_unknown_token(self, db):
        """Test unknown token is not found."""
        assert get_active_token('nonexistent') is None

    def test_expired_token(self, user):
        """Test expired token is not found."""
        raw_token, access_token = issue_token(user)
        AccessToken.objects.filter(id=access_token.id).update(
            expires_at=timezone.now() - timedelta(seconds=1),
        )

        assert get_active_token(raw_token) is None


@pytest.mark.django_db
class TestRevokeToken:
    """Tests for revoke_token."""

    def test_revoke(self, user):
        """Test revoked token stops working."""
        raw_token, _ = issue_token(user)

        assert revoke_token(raw_token) is True
        assert get_active_token(raw_token) is None

    def test_revoke_unknown(self, db):
        """Test revoking unknown token."""
        assert revoke_token('nonexistent') is False

    def test_revoke_keeps_other_sessions(self, user):
        """Test only the presented token is revoked."""
        first, _ = issue_token(user)
        second, _ = issue_token(user)

        revoke_token(first)

        assert get_active_token(second) is not None


@pytest.mark.django_db
def test_cleanup_expired_tokens(user):
    """Test only expired tokens are removed."""
    _, expired = issue_token(user)
    _, active = issue_token(user)
    AccessToken.objects.filter(id=expired.id).update(
        expires_at=timezone.now() - timedelta(seconds=1),
    )

    assert cleanup_expired_tokens() == 1
    assert AccessToken.objects.filter(id=active.id).exists()
