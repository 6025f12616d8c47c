"""S3-compatible storage backend and its per-user object store adapter."""

import logging
from typing import Any, final, override

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from storages.backends.s3 import S3Storage

from server.apps.files.exceptions import StoreDeleteError, StoreWriteError
from server.apps.files.infrastructure.metadata import (
    extract_filename,
    validate_storage_path,
)

logger = logging.getLogger(__name__)


@final
class FileStorage(S3Storage):
    """Custom S3 storage backend for user files.

    Extends django-storages S3Storage with:
    - Rollback support for failed metadata writes
    - Enhanced error logging
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to S3 with error handling and logging.

        Args:
            name: Storage path for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage path used (differs from name if it was taken).

        Raises:
            Exception: If S3 upload fails.
        """
        try:
            logger.info('Uploading file to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully uploaded file: %s', saved_name)
        except Exception:
            logger.exception('Failed to upload file to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete file from S3 with error handling and logging.

        Args:
            name: Storage path of file to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted file: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def rollback_upload(self, name: str) -> bool:
        """Delete uploaded file after its metadata write failed.

        Best-effort: a failure is logged, not raised, so the caller
        can still report the original error. The caller decides what
        to do with the orphan.

        Args:
            name: Storage path of file to delete.

        Returns:
            True if the file was removed, False if it is now orphaned.
        """
        try:
            logger.warning('Rolling back upload, deleting file: %s', name)
            self.delete(name)
        except Exception:
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                name,
            )
            return False
        logger.info('Successfully rolled back file upload: %s', name)
        return True


def get_file_storage() -> FileStorage:
    """Get the configured default storage backend.

    Returns:
        FileStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]


@final
class ObjectStore:
    """Object store restricted to one user's key prefix.

    Keys outside ``{user_id}/`` are refused before any S3 call, so a
    handle scoped to one user cannot write or remove another user's
    objects whatever key it is given.
    """

    def __init__(self, user_id: int, storage: FileStorage | None = None) -> None:
        """Bind the store to a user.

        Args:
            user_id: Owner whose prefix this store may touch.
            storage: Backend to use, the default storage if omitted.
        """
        self._user_id = user_id
        self._storage = storage or get_file_storage()

    @property
    def user_id(self) -> int:
        """Owner of the key prefix."""
        return self._user_id

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        max_length: int | None = None,
    ) -> str:
        """Write bytes under the key.

        Existing objects are never replaced: if the key is taken, the
        backend picks an available variant and that key is returned.
        The variant is shortened to stay within ``max_length``.

        Args:
            key: Object key ``{user_id}/{name}``.
            data: Object payload.
            content_type: MIME type stored with the object.
            max_length: Optional limit for the returned key.

        Returns:
            Key the object was actually written to.

        Raises:
            ScopeViolationError: If the key is outside the user's prefix.
            StoreWriteError: If the backend rejects the write.
        """
        validate_storage_path(self._user_id, key)

        content = ContentFile(data, name=extract_filename(key))
        content.content_type = content_type  # type: ignore[attr-defined]
        try:
            return self._storage.save(key, content, max_length=max_length)
        except Exception as error:
            raise StoreWriteError(
                f'Failed to write object: {key}',
                key=key,
            ) from error

    def remove_object(self, key: str) -> None:
        """Remove the object under the key.

        Args:
            key: Object key ``{user_id}/{name}``.

        Raises:
            ScopeViolationError: If the key is outside the user's prefix.
            StoreDeleteError: If the backend rejects the removal.
        """
        validate_storage_path(self._user_id, key)
        try:
            self._storage.delete(key)
        except Exception as error:
            raise StoreDeleteError(
                f'Failed to remove object: {key}',
                key=key,
            ) from error

    def rollback_object(self, key: str) -> bool:
        """Remove a just-written object whose record could not be saved.

        Args:
            key: Object key ``{user_id}/{name}``.

        Returns:
            True if removed, False if the object is left orphaned.

        Raises:
            ScopeViolationError: If the key is outside the user's prefix.
        """
        validate_storage_path(self._user_id, key)
        return self._storage.rollback_upload(key)

    def exists(self, key: str) -> bool:
        """Check whether an object is stored under the key.

        Args:
            key: Object key ``{user_id}/{name}``.

        Returns:
            True if the object exists.

        Raises:
            ScopeViolationError: If the key is outside the user's prefix.
        """
        validate_storage_path(self._user_id, key)
        return self._storage.exists(key)
