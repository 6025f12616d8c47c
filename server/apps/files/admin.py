"""Django admin configuration for files app."""


from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.models import File, OrphanedObject


def _format_size(size_bytes: int) -> str:
    """Format a byte count for display.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    return f'{size_bytes / (1024 * 1024):.1f} MB'


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model.

    Records are read-only here: editing or deleting a record in the
    admin would bypass the object store and break the pairing.
    """

    list_display = [
        'original_name_display',
        'user',
        'storage_key_display',
        'size_display',
        'mime_type',
        'created_at',
    ]

    list_filter = [
        'mime_type',
        'created_at',
    ]

    search_fields = [
        'name',
        'user__username',
    ]

    readonly_fields = [
        'user',
        'name',
        'size',
        'mime_type',
        'created_at',
    ]

    def original_name_display(self, obj: File) -> str:
        """Display filename without the timestamp prefix.

        Args:
            obj: File instance.

        Returns:
            Filename as uploaded.
        """
        return obj.get_original_name()
    original_name_display.short_description = 'Filename'  # type: ignore[attr-defined]

    def storage_key_display(self, obj: File) -> str:
        """Display the object key.

        Args:
            obj: File instance.

        Returns:
            Key of the stored object.
        """
        return obj.storage_key
    storage_key_display.short_description = 'Storage key'  # type: ignore[attr-defined]

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string.
        """
        return _format_size(obj.size)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Records are only created by uploads."""
        return False

    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: File | None = None,
    ) -> bool:
        """Records are only deleted through the delete route."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user')


@admin.register(OrphanedObject)
class OrphanedObjectAdmin(admin.ModelAdmin[OrphanedObject]):
    """Admin interface for the orphan reconciliation ledger."""

    list_display = [
        'key',
        'user_id',
        'reason',
        'attempts',
        'last_attempt_at',
    ]

    list_filter = ['reason']

    search_fields = ['key']

    readonly_fields = [
        'key',
        'user_id',
        'reason',
        'attempts',
        'last_error',
        'created_at',
        'last_attempt_at',
    ]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Ledger rows are only written by failed cleanups."""
        return False
