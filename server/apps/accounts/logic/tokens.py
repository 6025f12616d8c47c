"""Bearer token lifecycle.

Issues, looks up and revokes access tokens. Tokens are random
URL-safe strings; only their SHA256 digest reaches the database.
"""

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import TYPE_CHECKING, Final

from django.conf import settings
from django.utils import timezone

from server.apps.accounts.models import AccessToken

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

# Token length in bytes (generates 43 URL-safe chars)
_TOKEN_BYTES: Final = 32


def get_token_ttl() -> int:
    """Get access token lifetime in seconds.

    Returns:
        TTL from settings or default of 3600 (1 hour).
    """
    return getattr(settings, 'ACCESS_TOKEN_TTL', 3600)


def digest_token(raw_token: str) -> str:
    """Hash a raw bearer token for storage and lookup.

    Args:
        raw_token: Token as presented by the client.

    Returns:
        Hex-encoded SHA256 digest.
    """
    return hashlib.sha256(raw_token.encode()).hexdigest()


def issue_token(user: 'User') -> tuple[str, AccessToken]:
    """Create a new access token for the user.

    Cleans expired tokens first so the table does not grow
    with every login.

    Args:
        user: Authenticated user.

    Returns:
        Tuple of the raw token and the stored AccessToken row.
    """
    cleanup_expired_tokens()

    raw_token = secrets.token_urlsafe(_TOKEN_BYTES)
    access_token = AccessToken.objects.create(
        user=user,
        token_digest=digest_token(raw_token),
        expires_at=timezone.now() + timedelta(seconds=get_token_ttl()),
    )

    logger.info(
        'Access token issued for user %s: %s',
        user.username,
        access_token.token_digest[:8],
    )
    return raw_token, access_token


def get_active_token(raw_token: str) -> AccessToken | None:
    """Look up an unexpired token by its raw value.

    Args:
        raw_token: Token as presented by the client.

    Returns:
        AccessToken with its user loaded, or None if unknown or expired.
    """
    return (
        AccessToken.objects.select_related('user')
        .filter(
            token_digest=digest_token(raw_token),
            expires_at__gt=timezone.now(),
        )
        .first()
    )


def revoke_token(raw_token: str) -> bool:
    """Revoke a token so it can no longer authenticate.

    Args:
        raw_token: Token as presented by the client.

    Returns:
        True if a token was found and deleted, False otherwise.
    """
    deleted, _ = AccessToken.objects.filter(
        token_digest=digest_token(raw_token),
    ).delete()

    if deleted:
        logger.info('Access token revoked: %s', digest_token(raw_token)[:8])

    return deleted > 0


def cleanup_expired_tokens() -> int:
    """Remove tokens past their expiry.

    Returns:
        Number of tokens cleaned up.
    """
    deleted, _ = AccessToken.objects.filter(
        expires_at__lte=timezone.now(),
    ).delete()

    if deleted:
        logger.info('Cleaned up %d expired access tokens', deleted)

    return deleted
