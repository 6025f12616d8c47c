"""Database models for bearer token authentication."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

# SHA256 hex digest length
_TOKEN_DIGEST_MAX_LENGTH: Final = 64


@final
class AccessToken(models.Model):
    """Bearer token issued at login.

    Only the SHA256 digest of the token is stored. The raw value is
    handed to the client once, inside the login session payload.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='access_tokens',
        db_index=True,
    )

    token_digest = models.CharField(
        max_length=_TOKEN_DIGEST_MAX_LENGTH,
        unique=True,
        help_text='SHA256 digest of the bearer token',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    expires_at = models.DateTimeField(
        db_index=True,
        help_text='Token is rejected after this moment',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'Access Token'  # type: ignore[mutable-override]
        verbose_name_plural = 'Access Tokens'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username} ({self.token_digest[:8]})'

    def is_expired(self) -> bool:
        """Check whether the token is past its expiry.

        Returns:
            True if the token can no longer be used.
        """
        return self.expires_at <= timezone.now()
