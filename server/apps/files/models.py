"""Database models for files app."""

from typing import Final, final, override

from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_MIME_TYPE_MAX_LENGTH: Final = 255
_KEY_MAX_LENGTH: Final = 1024
_REASON_MAX_LENGTH: Final = 32


@final
class File(models.Model):
    """Metadata record of an object stored in S3-compatible storage.

    The object lives at ``{user_id}/{name}``; ``name`` already carries
    the upload timestamp prefix (``{epoch_ms}-{original_name}``).
    A record exists exactly as long as its object does.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Stored name: {epoch_ms}-{original_name}',
    )

    size = models.BigIntegerField(
        help_text='File size in bytes',
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        help_text='MIME type declared by the uploader',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering = ['-created_at', '-id']

        indexes = [
            # Optimize newest-first listing
            models.Index(
                fields=['user', '-created_at'],
                name='files_user_recent_idx',
            ),
        ]

        constraints = [
            # One record per storage key
            models.UniqueConstraint(
                fields=['user', 'name'],
                name='files_user_name_unique',
            ),
            models.CheckConstraint(
                condition=models.Q(size__gte=0),
                name='files_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.name}'

    @property
    def storage_key(self) -> str:
        """Key of the stored object: ``{user_id}/{name}``."""
        return f'{self.user_id}/{self.name}'

    def get_original_name(self) -> str:
        """Strip the timestamp prefix from the stored name.

        Example: '1700000000000-notes.txt' -> 'notes.txt'

        Returns:
            Filename as it was uploaded.
        """
        _, separator, original = self.name.partition('-')
        return original if separator else self.name

    def to_dict(self) -> dict[str, object]:
        """Serialize for the JSON API.

        Returns:
            Dictionary with id, name, size, type, user_id, created_at.
        """
        return {
            'id': self.id,
            'name': self.name,
            'size': self.size,
            'type': self.mime_type,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat(),
        }


@final
class OrphanedObject(models.Model):
    """Stored object left behind without a matching file record.

    Rows are written when upload compensation or delete cleanup fails
    to remove an object, and cleared by the reconcile_orphans command.
    """

    class Reason(models.TextChoices):
        """Which operation left the object behind."""

        UPLOAD_ROLLBACK = 'upload_rollback', 'Upload rollback'
        DELETE_CLEANUP = 'delete_cleanup', 'Delete cleanup'

    key = models.CharField(
        max_length=_KEY_MAX_LENGTH,
        unique=True,
        help_text='Object key: {user_id}/{name}',
    )

    # Plain id so the ledger outlives deleted users
    user_id = models.BigIntegerField(db_index=True)

    reason = models.CharField(
        max_length=_REASON_MAX_LENGTH,
        choices=Reason.choices,
    )

    attempts = models.PositiveIntegerField(
        default=1,
        help_text='Failed removal attempts so far',
    )

    last_error = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    last_attempt_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Orphaned Object'  # type: ignore[mutable-override]
        verbose_name_plural = 'Orphaned Objects'  # type: ignore[mutable-override]
        ordering = ['created_at']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.key} ({self.reason}, {self.attempts} attempts)'
