"""Django admin configuration for accounts app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.accounts.models import AccessToken


@admin.register(AccessToken)
class AccessTokenAdmin(admin.ModelAdmin[AccessToken]):
    """Admin interface for issued bearer tokens."""

    list_display = [
        'user',
        'digest_prefix',
        'created_at',
        'expires_at',
    ]

    list_filter = ['expires_at']

    search_fields = ['user__username']

    readonly_fields = [
        'user',
        'token_digest',
        'created_at',
        'expires_at',
    ]

    def digest_prefix(self, obj: AccessToken) -> str:
        """Display the first characters of the token digest.

        Args:
            obj: AccessToken instance.

        Returns:
            Shortened digest.
        """
        return obj.token_digest[:8]
    digest_prefix.short_description = 'Digest'  # type: ignore[attr-defined]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Tokens are only issued through login."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[AccessToken]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user')
